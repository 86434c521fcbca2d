from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .errors import LevelOutOfRangeError

MAX_LEVEL = 50


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


@dataclass(frozen=True)
class NumberRange:
    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError("number range min must not exceed max")


DIFFICULTY_RANGES: Dict[Difficulty, NumberRange] = {
    Difficulty.EASY: NumberRange(1, 9),
    Difficulty.MEDIUM: NumberRange(1, 12),
    Difficulty.HARD: NumberRange(1, 15),
    Difficulty.EXPERT: NumberRange(1, 20),
}


@dataclass(frozen=True)
class LevelConfig:
    level: int
    rows: int
    cols: int
    add_rows_allowed: int
    time_limit: int
    target_matches: int
    difficulty: Difficulty
    number_range: Optional[NumberRange] = None
    guaranteed_match_rate: float = 0.6

    def value_range(self) -> NumberRange:
        if self.number_range is not None:
            return self.number_range
        return DIFFICULTY_RANGES[self.difficulty]

    def guaranteed_pairs(self) -> int:
        return int(self.target_matches * self.guaranteed_match_rate)


AUTHORED_LEVELS: Dict[int, LevelConfig] = {
    1: LevelConfig(level=1, rows=3, cols=4, add_rows_allowed=2, time_limit=120, target_matches=8, difficulty=Difficulty.EASY),
    2: LevelConfig(level=2, rows=3, cols=4, add_rows_allowed=1, time_limit=120, target_matches=10, difficulty=Difficulty.MEDIUM),
    3: LevelConfig(level=3, rows=3, cols=4, add_rows_allowed=1, time_limit=120, target_matches=12, difficulty=Difficulty.HARD),
}
LAST_AUTHORED_LEVEL = max(AUTHORED_LEVELS)

# Extrapolation beyond the authored table, anchored on its last level.
_BASE = AUTHORED_LEVELS[LAST_AUTHORED_LEVEL]
ADD_ROWS_CAP = 5
TIME_FLOOR = 90
TIME_STEP = 5
RANGE_CAP = 20
MATCH_RATE_FLOOR = 0.3
MATCH_RATE_STEP = 0.02


def difficulty_for_level(level: int) -> Difficulty:
    if level <= 2:
        return Difficulty.EASY
    if level <= 4:
        return Difficulty.MEDIUM
    if level <= 7:
        return Difficulty.HARD
    return Difficulty.EXPERT


def _derive_level(level: int) -> LevelConfig:
    increment = level - LAST_AUTHORED_LEVEL
    base_max = _BASE.value_range().max
    target = _BASE.target_matches + increment * 2
    # The fresh grid alone holds enough tiles for every target match.
    cols = max(_BASE.cols, math.ceil(math.sqrt(target * 2)))
    rows = max(_BASE.rows, math.ceil(target * 2 / cols))
    return LevelConfig(
        level=level,
        rows=rows,
        cols=cols,
        add_rows_allowed=min(_BASE.add_rows_allowed + increment // 3, ADD_ROWS_CAP),
        time_limit=max(TIME_FLOOR, _BASE.time_limit - increment * TIME_STEP),
        target_matches=target,
        difficulty=difficulty_for_level(level),
        number_range=NumberRange(1, min(base_max + increment, RANGE_CAP)),
        guaranteed_match_rate=max(MATCH_RATE_FLOOR, round(_BASE.guaranteed_match_rate - increment * MATCH_RATE_STEP, 4)),
    )


def validate_level(level: object) -> int:
    if isinstance(level, bool) or not isinstance(level, int) or not 1 <= level <= MAX_LEVEL:
        raise LevelOutOfRangeError(level, MAX_LEVEL)
    return level


def get_level_config(level: int) -> LevelConfig:
    validate_level(level)
    authored = AUTHORED_LEVELS.get(level)
    if authored is not None:
        return authored
    return _derive_level(level)


def is_level_complete(matches: int, config: LevelConfig) -> bool:
    return matches >= config.target_matches


def next_level_number(level: int) -> int:
    return min(level + 1, MAX_LEVEL)
