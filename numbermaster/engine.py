from __future__ import annotations

import logging
import random
from typing import Callable, Dict, Optional

from .actions import Action, ActionKind
from .grid import add_row
from .levels import is_level_complete, next_level_number
from .scoring import calculate_score
from .state import GameState, GameStatus, MatchAnimation, new_game
from .tiles import find_tile, is_match, mark_tiles_matched

logger = logging.getLogger(__name__)

Handler = Callable[[GameState, Action, random.Random], GameState]


def _ignored(state: GameState, action: Action, reason: str) -> GameState:
    logger.debug("ignoring %s: %s", ActionKind(action.kind).value, reason)
    return state


def _start(state: GameState, action: Action, rng: random.Random) -> GameState:
    return new_game(action.level, rng=rng)


def _select(state: GameState, action: Action, rng: random.Random) -> GameState:
    if state.game_status != GameStatus.PLAYING:
        return _ignored(state, action, f"game is {state.game_status.value}")
    if action.tile is None:
        return _ignored(state, action, "no tile given")
    tile = find_tile(state.grid, action.tile.id)
    if tile is None:
        return _ignored(state, action, f"tile {action.tile.id} is not in the grid")
    if tile.matched:
        return _ignored(state, action, f"tile {tile.id} is already matched")

    new_state = state.copy()
    selected = state.selected_tile
    if selected is None:
        new_state.selected_tile = tile
        return new_state
    if selected.id == tile.id:
        new_state.selected_tile = None
        return new_state

    new_state.selected_tile = None
    if not is_match(selected, tile):
        new_state.last_match_animation = MatchAnimation(selected, tile, invalid=True)
        return new_state

    new_state.grid = mark_tiles_matched(state.grid, selected, tile)
    new_state.matches = state.matches + 1
    new_state.score = calculate_score(new_state.matches, state.time_remaining, state.level, state.add_rows_used)
    new_state.last_match_animation = MatchAnimation(selected, tile)
    if is_level_complete(new_state.matches, state.config):
        new_state.game_status = GameStatus.COMPLETED
    return new_state


def _add_row(state: GameState, action: Action, rng: random.Random) -> GameState:
    if state.game_status != GameStatus.PLAYING:
        return _ignored(state, action, f"game is {state.game_status.value}")
    config = state.config
    if state.add_rows_used >= config.add_rows_allowed:
        return _ignored(state, action, f"all {config.add_rows_allowed} extra rows used")
    new_state = state.copy()
    new_state.grid = add_row(state.grid, state.level, rng=rng, config=config)
    new_state.add_rows_used = state.add_rows_used + 1
    return new_state


def _tick(state: GameState, action: Action, rng: random.Random) -> GameState:
    if state.game_status != GameStatus.PLAYING:
        return _ignored(state, action, f"game is {state.game_status.value}")
    if state.time_remaining <= 0:
        return _ignored(state, action, "no time left")
    new_state = state.copy()
    new_state.time_remaining = state.time_remaining - 1
    if new_state.time_remaining == 0:
        new_state.game_status = GameStatus.FAILED
    return new_state


def _next_level(state: GameState, action: Action, rng: random.Random) -> GameState:
    if state.game_status not in (GameStatus.COMPLETED, GameStatus.FAILED):
        return _ignored(state, action, f"game is {state.game_status.value}")
    return new_game(next_level_number(state.level), rng=rng)


def _reset(state: GameState, action: Action, rng: random.Random) -> GameState:
    if state.game_status == GameStatus.MENU:
        return _ignored(state, action, "no level in progress")
    level = action.level if action.level is not None else state.level
    return new_game(level, rng=rng)


def _pause(state: GameState, action: Action, rng: random.Random) -> GameState:
    if state.game_status != GameStatus.PLAYING:
        return _ignored(state, action, f"game is {state.game_status.value}")
    new_state = state.copy()
    new_state.game_status = GameStatus.PAUSED
    return new_state


def _resume(state: GameState, action: Action, rng: random.Random) -> GameState:
    if state.game_status != GameStatus.PAUSED:
        return _ignored(state, action, f"game is {state.game_status.value}")
    new_state = state.copy()
    new_state.game_status = GameStatus.PLAYING
    return new_state


def _clear_animation(state: GameState, action: Action, rng: random.Random) -> GameState:
    if state.last_match_animation is None:
        return state
    new_state = state.copy()
    new_state.last_match_animation = None
    return new_state


_HANDLERS: Dict[ActionKind, Handler] = {
    ActionKind.START_GAME: _start,
    ActionKind.SELECT_TILE: _select,
    ActionKind.ADD_ROW: _add_row,
    ActionKind.TICK_TIMER: _tick,
    ActionKind.NEXT_LEVEL: _next_level,
    ActionKind.RESET_GAME: _reset,
    ActionKind.PAUSE_GAME: _pause,
    ActionKind.RESUME_GAME: _resume,
    ActionKind.CLEAR_MATCH_ANIMATION: _clear_animation,
}


def apply_action(state: GameState, action: Action, rng: Optional[random.Random] = None) -> GameState:
    """Return the state that follows ``action``; ``state`` itself is never modified.

    Actions whose guard does not hold return ``state`` unchanged. Starting or
    resetting to a level outside the registry raises ``LevelOutOfRangeError``.
    """
    handler = _HANDLERS.get(getattr(action, "kind", None))
    if handler is None:
        logger.warning("unknown action %r, state left unchanged", action)
        return state
    return handler(state, action, rng or random.Random())
