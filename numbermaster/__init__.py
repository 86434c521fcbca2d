"""Number Master core engine package."""

from .actions import Action, ActionKind
from .engine import apply_action
from .errors import LevelOutOfRangeError, NumberMasterError, StateRestoreError
from .grid import add_row, generate_grid
from .levels import MAX_LEVEL, Difficulty, LevelConfig, NumberRange, get_level_config
from .progress import CompletionResult, LevelProgress
from .scoring import calculate_score, star_rating
from .session import GameSession, TickTimer
from .state import GameState, GameStatus, MatchAnimation, new_game, restore_state, serialize_state
from .tiles import Tile, count_available_matches, is_match

__all__ = [
    "Action",
    "ActionKind",
    "apply_action",
    "LevelOutOfRangeError",
    "NumberMasterError",
    "StateRestoreError",
    "add_row",
    "generate_grid",
    "MAX_LEVEL",
    "Difficulty",
    "LevelConfig",
    "NumberRange",
    "get_level_config",
    "CompletionResult",
    "LevelProgress",
    "calculate_score",
    "star_rating",
    "GameSession",
    "TickTimer",
    "GameState",
    "GameStatus",
    "MatchAnimation",
    "new_game",
    "restore_state",
    "serialize_state",
    "Tile",
    "count_available_matches",
    "is_match",
]
