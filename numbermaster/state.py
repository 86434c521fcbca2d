from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import StateRestoreError
from .grid import generate_grid
from .levels import LevelConfig, get_level_config
from .tiles import Grid, Tile, find_tile

SNAPSHOT_VERSION = 1


class GameStatus(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class MatchAnimation:
    tile1: Tile
    tile2: Tile
    invalid: bool = False


@dataclass
class GameState:
    level: int
    grid: Grid
    selected_tile: Optional[Tile] = None
    matches: int = 0
    score: int = 0
    time_remaining: int = 0
    add_rows_used: int = 0
    game_status: GameStatus = GameStatus.MENU
    last_match_animation: Optional[MatchAnimation] = None

    @property
    def config(self) -> LevelConfig:
        return get_level_config(self.level)

    def copy(self) -> "GameState":
        # Tiles and rows are immutable, so a shallow copy never shares mutable data.
        return replace(self)

    def state_key(self) -> Tuple:
        return (
            self.level,
            tuple(tuple((t.id, t.value, t.matched) for t in row) for row in self.grid),
            None if self.selected_tile is None else self.selected_tile.id,
            self.matches,
            self.score,
            self.time_remaining,
            self.add_rows_used,
            self.game_status.value,
        )


def new_game(level: int, rng: Optional[random.Random] = None) -> GameState:
    config = get_level_config(level)
    return GameState(
        level=level,
        grid=generate_grid(level, rng=rng, config=config),
        time_remaining=config.time_limit,
        game_status=GameStatus.PLAYING,
    )


def menu_state() -> GameState:
    return GameState(level=1, grid=(), time_remaining=get_level_config(1).time_limit)


def _animation_to_dict(animation: Optional[MatchAnimation]) -> Optional[Dict[str, Any]]:
    if animation is None:
        return None
    return {
        "tile1": animation.tile1.to_dict(),
        "tile2": animation.tile2.to_dict(),
        "invalid": animation.invalid,
    }


def serialize_state(state: GameState) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "level": state.level,
        "grid": [[tile.to_dict() for tile in row] for row in state.grid],
        "selected_tile": None if state.selected_tile is None else state.selected_tile.id,
        "matches": state.matches,
        "score": state.score,
        "time_remaining": state.time_remaining,
        "add_rows_used": state.add_rows_used,
        "game_status": state.game_status.value,
        "last_match_animation": _animation_to_dict(state.last_match_animation),
    }


def restore_state(data: Dict[str, Any]) -> GameState:
    try:
        if data.get("version") != SNAPSHOT_VERSION:
            raise StateRestoreError(f"unsupported snapshot version: {data.get('version')!r}")
        level = int(data["level"])
        config = get_level_config(level)
        grid: Grid = tuple(tuple(Tile.from_dict(t) for t in row) for row in data["grid"])
        selected_id = data["selected_tile"]
        selected = None
        if selected_id is not None:
            selected = find_tile(grid, selected_id)
            if selected is None or selected.matched:
                raise StateRestoreError(f"selected tile {selected_id!r} is not an unmatched tile of the grid")
        animation = None
        if data["last_match_animation"] is not None:
            raw = data["last_match_animation"]
            animation = MatchAnimation(Tile.from_dict(raw["tile1"]), Tile.from_dict(raw["tile2"]), bool(raw["invalid"]))
        state = GameState(
            level=level,
            grid=grid,
            selected_tile=selected,
            matches=int(data["matches"]),
            score=int(data["score"]),
            time_remaining=int(data["time_remaining"]),
            add_rows_used=int(data["add_rows_used"]),
            game_status=GameStatus(data["game_status"]),
            last_match_animation=animation,
        )
    except StateRestoreError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise StateRestoreError(f"malformed game snapshot: {exc}") from exc

    if any(len(row) != config.cols for row in grid):
        raise StateRestoreError("every grid row must have the level's column count")
    ids = [t.id for row in grid for t in row]
    if len(set(ids)) != len(ids):
        raise StateRestoreError("tile ids must be unique")
    if min(state.matches, state.score, state.time_remaining, state.add_rows_used) < 0:
        raise StateRestoreError("counters must be non-negative")
    if state.add_rows_used > config.add_rows_allowed:
        raise StateRestoreError("add rows used exceeds the level allowance")
    if state.matches * 2 > len(ids):
        raise StateRestoreError("more matches than the grid can hold")
    matched_tiles = sum(1 for row in grid for t in row if t.matched)
    if state.matches * 2 != matched_tiles:
        raise StateRestoreError(f"{state.matches} matches recorded but {matched_tiles} tiles are matched")
    if state.game_status == GameStatus.PLAYING and state.time_remaining == 0:
        raise StateRestoreError("a level in play must have time left")
    if state.game_status in (GameStatus.PLAYING, GameStatus.PAUSED) and state.matches >= config.target_matches:
        raise StateRestoreError("a level that reached its target must be completed")
    return state
