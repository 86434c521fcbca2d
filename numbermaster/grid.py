from __future__ import annotations

import logging
import random
from typing import List, Optional

from .levels import LevelConfig, get_level_config
from .tiles import MATCH_SUM, Grid, Row, Tile

logger = logging.getLogger(__name__)


def _random_value(config: LevelConfig, rng: random.Random) -> int:
    value_range = config.value_range()
    return rng.randint(value_range.min, value_range.max)


def _random_row(row: int, config: LevelConfig, rng: random.Random) -> Row:
    return tuple(Tile.at(row, col, _random_value(config, rng)) for col in range(config.cols))


def _seed_guaranteed_pairs(values: List[List[int]], config: LevelConfig, rng: random.Random) -> None:
    if config.cols < 2:
        logger.debug("level %d has %d column(s), skipping pair seeding", config.level, config.cols)
        return
    for _ in range(config.guaranteed_pairs()):
        row = rng.randrange(config.rows)
        col1, col2 = rng.sample(range(config.cols), 2)
        if rng.random() < 0.5:
            value = _random_value(config, rng)
            values[row][col1] = value
            values[row][col2] = value
        else:
            value = rng.randint(1, MATCH_SUM - 1)
            values[row][col1] = value
            values[row][col2] = MATCH_SUM - value


def generate_grid(level: int, rng: Optional[random.Random] = None, config: Optional[LevelConfig] = None) -> Grid:
    """Build a fresh rows x cols grid with part of the target matches pre-seeded.

    Seeded pairs always sit in the same row, at two distinct columns. Later pairs
    may overwrite earlier ones, so the number of seeded pairs is an upper bound.
    """
    config = config or get_level_config(level)
    rng = rng or random.Random()
    values = [[_random_value(config, rng) for _ in range(config.cols)] for _ in range(config.rows)]
    _seed_guaranteed_pairs(values, config, rng)
    return tuple(
        tuple(Tile.at(row, col, value) for col, value in enumerate(row_values))
        for row, row_values in enumerate(values)
    )


def add_row(grid: Grid, level: int, rng: Optional[random.Random] = None, config: Optional[LevelConfig] = None) -> Grid:
    config = config or get_level_config(level)
    rng = rng or random.Random()
    return grid + (_random_row(len(grid), config, rng),)
