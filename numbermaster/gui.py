from __future__ import annotations

"""
Number Master GUI: a pygame front end over GameSession.

Screens:
- Menu: pick a level (click a button or press 1..9, Enter starts the highlighted level).
- Playing: click a tile to select it, click a second tile to try the pair.
    * A adds a row (while the level allows it), Space pauses / resumes.
    * H flashes a hint: the first pair still available.
- Completed / failed overlays: N next level, R retry, M back to the menu.
- Esc quits from anywhere.

The window never edits the game state: every change goes through
GameSession.dispatch, and the countdown is driven by a TickTimer fed with the
frame time.
"""

from dataclasses import dataclass
import logging
import os
import pathlib
from typing import Dict, List, Optional, Sequence, Tuple

from .actions import Action
from .levels import MAX_LEVEL, get_level_config
from .progress import LevelProgress
from .session import GameSession, TickTimer
from .state import GameState, GameStatus, MatchAnimation
from .tiles import Grid, Tile, find_available_match

try:
    import pygame  # type: ignore
except ImportError:  # pragma: no cover
    pygame = None  # type: ignore

logger = logging.getLogger(__name__)

Rect = Tuple[int, int, int, int]

SCREENSHOT_ENV = "NUMBERMASTER_GUI_SCREENSHOT_PATH"
FEEDBACK_SECONDS = 1.0
MENU_LEVELS = 12


# --- Pure helpers --------------------------------------------------------------

def format_time(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


def timer_color(seconds: float) -> Tuple[int, int, int]:
    if seconds <= 10:
        return ERR
    if seconds <= 30:
        return WARN
    return OK


def resolve_screenshot_path() -> Optional[pathlib.Path]:
    raw = os.environ.get(SCREENSHOT_ENV)
    if not raw:
        return None
    return pathlib.Path(raw).expanduser()


def contains(rect: Rect, pos: Tuple[int, int]) -> bool:
    x, y, w, h = rect
    return x <= pos[0] < x + w and y <= pos[1] < y + h


@dataclass
class TileCell:
    rect: Rect
    tile: Tile


def layout_grid(grid: Grid, area: Rect, gap: int = 8, max_tile: int = 96) -> List[TileCell]:
    """Square cells centred in ``area``; the grid shrinks tiles as rows are added."""
    if not grid:
        return []
    x, y, w, h = area
    rows = len(grid)
    cols = max(len(row) for row in grid)
    size = min((w - gap * (cols - 1)) // cols, (h - gap * (rows - 1)) // rows, max_tile)
    size = max(size, 8)
    total_w = cols * size + gap * (cols - 1)
    total_h = rows * size + gap * (rows - 1)
    left = x + (w - total_w) // 2
    top = y + (h - total_h) // 2
    cells = []
    for r, row in enumerate(grid):
        for c, tile in enumerate(row):
            cells.append(TileCell(rect=(left + c * (size + gap), top + r * (size + gap), size, size), tile=tile))
    return cells


def hit_test(cells: Sequence[TileCell], pos: Tuple[int, int]) -> Optional[Tile]:
    for cell in cells:
        if contains(cell.rect, pos):
            return cell.tile
    return None


def level_button_rects(count: int, area: Rect, per_row: int = 4, gap: int = 12) -> List[Rect]:
    x, y, w, h = area
    rows = max(1, -(-count // per_row))
    bw = (w - gap * (per_row - 1)) // per_row
    bh = min(64, (h - gap * (rows - 1)) // rows)
    rects = []
    for idx in range(count):
        r, c = divmod(idx, per_row)
        rects.append((x + c * (bw + gap), y + r * (bh + gap), bw, bh))
    return rects


class FeedbackClock:
    """Decides when the last match feedback has been on screen long enough."""

    def __init__(self, window: float = FEEDBACK_SECONDS) -> None:
        self.window = window
        self._shown: Optional[MatchAnimation] = None
        self._age = 0.0

    def update(self, animation: Optional[MatchAnimation], dt: float) -> bool:
        if animation is None:
            self._shown = None
            self._age = 0.0
            return False
        if animation is not self._shown:
            self._shown = animation
            self._age = 0.0
            return False
        self._age += dt
        return self._age >= self.window


def status_message(state: GameState) -> str:
    animation = state.last_match_animation
    if state.game_status == GameStatus.PAUSED:
        return "Paused. Space to resume."
    if state.game_status == GameStatus.COMPLETED:
        return "Level complete! N: next level, R: replay, M: menu."
    if state.game_status == GameStatus.FAILED:
        return "Time's up! R: try again, M: menu."
    if animation is not None:
        a, b = animation.tile1.value, animation.tile2.value
        if animation.invalid:
            return f"{a} and {b} are neither equal nor sum to 10."
        return f"Match: {a} + {b}"
    if state.selected_tile is not None:
        return f"Selected {state.selected_tile.value}. Pick its partner."
    return "Pair equal numbers or numbers that sum to 10."


def overlay_lines(state: GameState, stars: Optional[int] = None) -> Tuple[str, List[str]]:
    config = state.config
    stats = [f"Score: {state.score}", f"Matches: {state.matches}/{config.target_matches}"]
    if state.game_status == GameStatus.COMPLETED:
        if stars is not None:
            stats.append("Stars: " + "*" * stars)
        return f"Level {state.level} complete!", stats
    if state.game_status == GameStatus.FAILED:
        return "Time's up!", stats
    return "Paused", [f"Time left: {format_time(state.time_remaining)}"]


# --- Theme ----------------------------------------------------------------------

BG = (22, 27, 34)
PANEL = (30, 36, 46)
PANEL_LINE = (54, 63, 77)
TEXT = (220, 226, 235)
SUB = (164, 174, 187)
ACCENT = (88, 138, 255)
OK = (66, 171, 119)
ERR = (235, 87, 87)
WARN = (255, 170, 40)
TILE_FACE = (245, 245, 245)
TILE_MATCHED = (52, 60, 74)


# --- Drawing --------------------------------------------------------------------

def draw_panel(surface, rect: Rect, font, title: Optional[str] = None):
    r = pygame.Rect(rect)
    pygame.draw.rect(surface, PANEL, r, border_radius=10)
    pygame.draw.rect(surface, PANEL_LINE, r, width=2, border_radius=10)
    if title:
        surface.blit(font.render(title, True, SUB), (r.x + 10, r.y + 6))


def draw_button(surface, rect: Rect, label: str, font, enabled: bool = True, highlight: bool = False):
    r = pygame.Rect(rect)
    bg = (46, 56, 69) if enabled else (35, 42, 52)
    border = ACCENT if enabled and highlight else ((80, 92, 110) if enabled else (60, 70, 82))
    pygame.draw.rect(surface, bg, r, border_radius=10)
    pygame.draw.rect(surface, border, r, width=2, border_radius=10)
    txt = font.render(label, True, TEXT if enabled else (120, 130, 140))
    surface.blit(txt, txt.get_rect(center=r.center))


def draw_tile(surface, cell: TileCell, selected: bool, feedback: Optional[MatchAnimation], hinted: bool):
    r = pygame.Rect(cell.rect)
    tile = cell.tile
    if tile.matched:
        pygame.draw.rect(surface, TILE_MATCHED, r, border_radius=8)
        return
    border = (60, 70, 85)
    if feedback is not None and tile.id in (feedback.tile1.id, feedback.tile2.id):
        border = ERR if feedback.invalid else OK
    elif selected:
        border = ACCENT
    elif hinted:
        border = WARN
    pygame.draw.rect(surface, TILE_FACE, r, border_radius=8)
    pygame.draw.rect(surface, border, r, width=4 if border != (60, 70, 85) else 2, border_radius=8)
    font = pygame.font.SysFont("arial", max(12, int(r.height * 0.5)), bold=True)
    txt = font.render(str(tile.value), True, (40, 40, 50))
    surface.blit(txt, txt.get_rect(center=r.center))


def draw_header(surface, rect: Rect, state: GameState, fonts) -> None:
    font, title_font, _ = fonts
    config = state.config
    draw_panel(surface, rect, font)
    x, y, w, h = rect
    surface.blit(title_font.render(f"Level {state.level}", True, TEXT), (x + 12, y + 12))
    info = f"Score {state.score}   Matches {state.matches}/{config.target_matches}   Rows +{config.add_rows_allowed - state.add_rows_used}"
    surface.blit(font.render(info, True, SUB), (x + 150, y + 18))
    clock_txt = title_font.render(format_time(state.time_remaining), True, timer_color(state.time_remaining))
    surface.blit(clock_txt, (x + w - clock_txt.get_width() - 14, y + 12))


def draw_overlay(surface, title: str, lines: List[str], fonts) -> None:
    font, title_font, _ = fonts
    W, H = surface.get_size()
    shade = pygame.Surface((W, H), pygame.SRCALPHA)
    shade.fill((10, 12, 16, 190))
    surface.blit(shade, (0, 0))
    box = pygame.Rect(0, 0, min(440, W - 40), 60 + 30 * (len(lines) + 1))
    box.center = (W // 2, H // 2)
    draw_panel(surface, (box.x, box.y, box.width, box.height), font)
    t = title_font.render(title, True, TEXT)
    surface.blit(t, t.get_rect(midtop=(box.centerx, box.y + 16)))
    for i, line in enumerate(lines):
        s = font.render(line, True, SUB)
        surface.blit(s, s.get_rect(midtop=(box.centerx, box.y + 60 + 30 * i)))


def status_bar(surface, rect: Rect, left: str, right: str, small_font):
    draw_panel(surface, rect, small_font)
    x, y, w, h = rect
    l = small_font.render(left, True, SUB)
    r = small_font.render(right, True, SUB)
    surface.blit(l, (x + 10, y + (h - l.get_height()) // 2))
    surface.blit(r, (x + w - 10 - r.get_width(), y + (h - r.get_height()) // 2))


# --- GUI entry --------------------------------------------------------------------

def launch_gui(level: Optional[int] = None, seed: Optional[int] = None) -> None:  # pragma: no cover
    if pygame is None:
        raise ImportError("pygame is required for the GUI. Install it with `pip install pygame`.")

    progress = LevelProgress()
    stars_by_level: Dict[int, int] = {}

    def on_change(state: GameState, action: Optional[Action]) -> None:
        if state.game_status == GameStatus.COMPLETED and state.level not in stars_by_level:
            stars_by_level[state.level] = progress.record_completion(state).stars

    session = GameSession(seed=seed, listeners=[on_change])
    timer = TickTimer(session)
    feedback = FeedbackClock()
    menu_choice = 1
    hint: Optional[Tuple[Tile, Tile]] = None

    def start(selected_level: int) -> None:
        nonlocal hint
        stars_by_level.pop(selected_level, None)
        hint = None
        session.dispatch(Action.start(selected_level))

    pygame.init()
    pygame.display.set_caption("Number Master")
    screen = pygame.display.set_mode((900, 720), pygame.RESIZABLE)
    clock = pygame.time.Clock()
    fonts = (
        pygame.font.SysFont("arial", 18),
        pygame.font.SysFont("arial", 28, bold=True),
        pygame.font.SysFont("arial", 14),
    )
    font, title_font, small_font = fonts

    if level is not None:
        start(level)

    running = True
    while running:
        dt = clock.tick(60) / 1000.0
        state = session.state
        if state.game_status != GameStatus.MENU:
            timer.advance(dt)
            if feedback.update(session.state.last_match_animation, dt):
                session.dispatch(Action.clear_animation())
        state = session.state

        W, H = screen.get_size()
        margin = 10
        screen.fill(BG)
        header = (margin, margin, W - 2 * margin, 56)
        status = (margin, H - 42, W - 2 * margin, 32)
        board = (margin, header[1] + header[3] + margin, W - 2 * margin, status[1] - header[3] - 3 * margin)

        cells: List[TileCell] = []
        menu_rects: List[Rect] = []
        if state.game_status == GameStatus.MENU:
            draw_panel(screen, board, font, "Choose a level")
            menu_rects = level_button_rects(MENU_LEVELS, (board[0] + 30, board[1] + 50, board[2] - 60, board[3] - 80))
            for idx, rect in enumerate(menu_rects, start=1):
                config = get_level_config(idx)
                done = idx in progress.completed_levels
                label = f"{idx} {config.difficulty.value}" + (" *" if done else "")
                draw_button(screen, rect, label, font, highlight=idx == menu_choice)
            status_bar(screen, status, "Click a level or press Enter.", f"Completed {len(progress.completed_levels)}/{MAX_LEVEL}", small_font)
        else:
            draw_header(screen, header, state, fonts)
            draw_panel(screen, board, font)
            cells = layout_grid(state.grid, (board[0] + 16, board[1] + 16, board[2] - 32, board[3] - 32))
            hinted = {t.id for t in hint} if hint else set()
            selected_id = state.selected_tile.id if state.selected_tile else None
            for cell in cells:
                draw_tile(screen, cell, cell.tile.id == selected_id, state.last_match_animation, cell.tile.id in hinted)
            status_bar(screen, status, status_message(state), "A add row | Space pause | H hint | Esc quit", small_font)
            if state.game_status in (GameStatus.PAUSED, GameStatus.COMPLETED, GameStatus.FAILED):
                title, lines = overlay_lines(state, stars_by_level.get(state.level))
                draw_overlay(screen, title, lines, fonts)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode(event.size, pygame.RESIZABLE)
            elif event.type == pygame.KEYDOWN:
                status_now = session.state.game_status
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif status_now == GameStatus.MENU:
                    if pygame.K_1 <= event.key <= pygame.K_9:
                        menu_choice = event.key - pygame.K_0
                    elif event.key == pygame.K_RETURN:
                        start(menu_choice)
                elif event.key == pygame.K_SPACE:
                    session.dispatch(Action.resume() if status_now == GameStatus.PAUSED else Action.pause())
                elif event.key == pygame.K_a:
                    session.dispatch(Action.add_row())
                    hint = None
                elif event.key == pygame.K_h and status_now == GameStatus.PLAYING:
                    hint = find_available_match(session.state.grid)
                    if hint is None:
                        logger.debug("no pair left on level %d", session.state.level)
                elif event.key == pygame.K_n and status_now == GameStatus.COMPLETED:
                    hint = None
                    session.dispatch(Action.next_level())
                elif event.key == pygame.K_r and status_now in (GameStatus.COMPLETED, GameStatus.FAILED):
                    start(session.state.level)
                elif event.key == pygame.K_m and status_now in (GameStatus.COMPLETED, GameStatus.FAILED):
                    menu_choice = session.state.level
                    session = GameSession(seed=seed, listeners=[on_change])
                    timer = TickTimer(session)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if session.state.game_status == GameStatus.MENU:
                    for idx, rect in enumerate(menu_rects, start=1):
                        if contains(rect, event.pos):
                            menu_choice = idx
                            start(idx)
                            break
                else:
                    tile = hit_test(cells, event.pos)
                    if tile is not None:
                        session.dispatch(Action.select(tile))
                        if tile.id in {t.id for t in hint or ()}:
                            hint = None

        pygame.display.flip()

    shot = resolve_screenshot_path()
    if shot is not None:
        pygame.image.save(screen, str(shot))
        logger.info("saved screenshot to %s", shot)
    pygame.quit()


if __name__ == "__main__":
    launch_gui()
