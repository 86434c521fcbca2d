from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .errors import LevelOutOfRangeError, StateRestoreError
from .levels import MAX_LEVEL, LevelConfig, get_level_config
from .scoring import calculate_score, star_rating
from .state import GameState, GameStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionResult:
    level: int
    score: int
    stars: int
    next_level: int
    can_progress: bool


CompletionCallback = Callable[[CompletionResult], None]
LevelChangeCallback = Callable[[int], None]


@dataclass
class LevelProgress:
    """Tracks which levels a player has finished and their best results."""

    current_level: int = 1
    max_level: int = MAX_LEVEL
    completed_levels: Set[int] = field(default_factory=set)
    best_scores: Dict[int, int] = field(default_factory=dict)
    best_stars: Dict[int, int] = field(default_factory=dict)
    on_level_complete: List[CompletionCallback] = field(default_factory=list, repr=False, compare=False)
    on_level_change: List[LevelChangeCallback] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 1 <= self.max_level <= MAX_LEVEL:
            raise ValueError(f"max_level must be within 1..{MAX_LEVEL}")
        if not 1 <= self.current_level <= self.max_level:
            raise LevelOutOfRangeError(self.current_level, self.max_level)
        self.on_level_complete = list(self.on_level_complete)
        self.on_level_change = list(self.on_level_change)

    def current_config(self) -> LevelConfig:
        return get_level_config(self.current_level)

    def record_completion(self, state: GameState) -> CompletionResult:
        if state.game_status != GameStatus.COMPLETED:
            raise ValueError(f"level {state.level} is not completed (status {state.game_status.value})")
        config = get_level_config(state.level)
        score = calculate_score(state.matches, state.time_remaining, state.level, state.add_rows_used)
        stars = star_rating(state.matches, state.time_remaining, state.add_rows_used, config)

        self.completed_levels.add(state.level)
        if score > self.best_scores.get(state.level, -1):
            self.best_scores[state.level] = score
        if stars > self.best_stars.get(state.level, 0):
            self.best_stars[state.level] = stars

        result = CompletionResult(
            level=state.level,
            score=score,
            stars=stars,
            next_level=min(state.level + 1, self.max_level),
            can_progress=state.level < self.max_level,
        )
        logger.info("recorded level %d: score=%d stars=%d", result.level, result.score, result.stars)
        for callback in self.on_level_complete:
            callback(result)
        return result

    def advance(self) -> Optional[LevelConfig]:
        if self.current_level >= self.max_level:
            return None
        return self._change_level(self.current_level + 1)

    def go_to_level(self, level: int) -> Optional[LevelConfig]:
        if not isinstance(level, int) or not 1 <= level <= self.max_level:
            return None
        return self._change_level(level)

    def reset(self) -> None:
        self.current_level = 1
        self.completed_levels.clear()
        self.best_scores.clear()
        self.best_stars.clear()
        for callback in self.on_level_change:
            callback(self.current_level)

    def summary(self) -> Dict[str, Any]:
        return {
            "current_level": self.current_level,
            "completed_levels": sorted(self.completed_levels),
            "total_completed": len(self.completed_levels),
            "progress": len(self.completed_levels) / self.max_level * 100,
            "max_level": self.max_level,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_level": self.current_level,
            "max_level": self.max_level,
            "completed_levels": sorted(self.completed_levels),
            "best_scores": {str(level): score for level, score in self.best_scores.items()},
            "best_stars": {str(level): stars for level, stars in self.best_stars.items()},
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        on_level_complete: Iterable[CompletionCallback] = (),
        on_level_change: Iterable[LevelChangeCallback] = (),
    ) -> "LevelProgress":
        try:
            return cls(
                current_level=int(data.get("current_level", 1)),
                max_level=int(data.get("max_level", MAX_LEVEL)),
                completed_levels={int(level) for level in data.get("completed_levels", [])},
                best_scores={int(k): int(v) for k, v in data.get("best_scores", {}).items()},
                best_stars={int(k): int(v) for k, v in data.get("best_stars", {}).items()},
                on_level_complete=list(on_level_complete),
                on_level_change=list(on_level_change),
            )
        except (TypeError, ValueError, AttributeError) as exc:
            raise StateRestoreError(f"malformed progress data: {exc}") from exc

    def _change_level(self, level: int) -> LevelConfig:
        self.current_level = level
        for callback in self.on_level_change:
            callback(level)
        return get_level_config(level)
