from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .tiles import Tile


class ActionKind(str, Enum):
    START_GAME = "START_GAME"
    SELECT_TILE = "SELECT_TILE"
    ADD_ROW = "ADD_ROW"
    TICK_TIMER = "TICK_TIMER"
    NEXT_LEVEL = "NEXT_LEVEL"
    RESET_GAME = "RESET_GAME"
    PAUSE_GAME = "PAUSE_GAME"
    RESUME_GAME = "RESUME_GAME"
    CLEAR_MATCH_ANIMATION = "CLEAR_MATCH_ANIMATION"


# Actions after which the session holds a brand new level state.
SESSION_REPLACING = frozenset({ActionKind.START_GAME, ActionKind.RESET_GAME, ActionKind.NEXT_LEVEL})


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    level: Optional[int] = None
    tile: Optional[Tile] = None

    @staticmethod
    def start(level: int) -> "Action":
        return Action(ActionKind.START_GAME, level=level)

    @staticmethod
    def select(tile: Tile) -> "Action":
        return Action(ActionKind.SELECT_TILE, tile=tile)

    @staticmethod
    def add_row() -> "Action":
        return Action(ActionKind.ADD_ROW)

    @staticmethod
    def tick() -> "Action":
        return Action(ActionKind.TICK_TIMER)

    @staticmethod
    def next_level() -> "Action":
        return Action(ActionKind.NEXT_LEVEL)

    @staticmethod
    def reset(level: Optional[int] = None) -> "Action":
        return Action(ActionKind.RESET_GAME, level=level)

    @staticmethod
    def pause() -> "Action":
        return Action(ActionKind.PAUSE_GAME)

    @staticmethod
    def resume() -> "Action":
        return Action(ActionKind.RESUME_GAME)

    @staticmethod
    def clear_animation() -> "Action":
        return Action(ActionKind.CLEAR_MATCH_ANIMATION)
