from __future__ import annotations

import math

from .levels import LevelConfig

MATCH_POINTS = 100
TIME_POINTS_PER_SECOND = 10
ADD_ROW_PENALTY = 50

THREE_STAR_THRESHOLD = 0.9
TWO_STAR_THRESHOLD = 0.7


def calculate_score(matches: int, time_remaining: float, level: int, add_rows_used: int = 0) -> int:
    """Score for a level: match points plus a time bonus, minus add-row penalties,
    multiplied by the level number and floored at zero."""
    base = matches * MATCH_POINTS
    time_bonus = math.floor(time_remaining * TIME_POINTS_PER_SECOND)
    penalty = add_rows_used * ADD_ROW_PENALTY
    return max(0, (base + time_bonus - penalty) * level)


def star_rating(matches: int, time_remaining: float, add_rows_used: int, config: LevelConfig) -> int:
    efficiency = matches / config.target_matches
    time_efficiency = time_remaining / config.time_limit
    add_row_efficiency = 1 - add_rows_used / max(config.add_rows_allowed, 1)
    overall = (efficiency + time_efficiency + add_row_efficiency) / 3
    if overall >= THREE_STAR_THRESHOLD:
        return 3
    if overall >= TWO_STAR_THRESHOLD:
        return 2
    return 1
