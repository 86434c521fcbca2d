import json
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from numbermaster.errors import StateRestoreError
from numbermaster.progress import CompletionResult, LevelProgress
from numbermaster.state import GameState, GameStatus


def _finished(level=1, matches=8, time_remaining=120, add_rows_used=0, status=GameStatus.COMPLETED):
    return GameState(
        level=level,
        grid=(),
        matches=matches,
        time_remaining=time_remaining,
        add_rows_used=add_rows_used,
        game_status=status,
    )


def test_record_completion_scores_and_rates():
    results = []
    progress = LevelProgress(on_level_complete=[results.append])

    result = progress.record_completion(_finished())

    assert result == CompletionResult(level=1, score=2000, stars=3, next_level=2, can_progress=True)
    assert results == [result]
    assert progress.completed_levels == {1}
    assert progress.best_scores == {1: 2000}
    assert progress.best_stars == {1: 3}


def test_best_results_are_kept():
    progress = LevelProgress()
    progress.record_completion(_finished(time_remaining=120))
    worse = progress.record_completion(_finished(time_remaining=20, add_rows_used=2))

    assert worse.score < 2000
    assert progress.best_scores[1] == 2000
    assert progress.best_stars[1] == 3


def test_only_completed_levels_are_recorded():
    progress = LevelProgress()
    with pytest.raises(ValueError):
        progress.record_completion(_finished(status=GameStatus.FAILED))
    assert progress.completed_levels == set()


def test_last_level_cannot_progress():
    progress = LevelProgress(max_level=3)
    result = progress.record_completion(_finished(level=3, matches=12))
    assert result.next_level == 3
    assert not result.can_progress


def test_advance_and_go_to_level_respect_cap():
    changes = []
    progress = LevelProgress(max_level=3, on_level_change=[changes.append])

    assert progress.advance().level == 2
    assert progress.go_to_level(3).level == 3
    assert progress.advance() is None
    assert progress.go_to_level(0) is None
    assert progress.go_to_level(4) is None
    assert changes == [2, 3]

    progress.reset()
    assert progress.current_level == 1
    assert changes[-1] == 1


def test_invalid_construction():
    with pytest.raises(ValueError):
        LevelProgress(max_level=0)
    with pytest.raises(ValueError):
        LevelProgress(current_level=5, max_level=3)


def test_summary():
    progress = LevelProgress()
    progress.record_completion(_finished())
    summary = progress.summary()
    assert summary["completed_levels"] == [1]
    assert summary["total_completed"] == 1
    assert summary["progress"] == pytest.approx(2.0)
    assert summary["max_level"] == 50


def test_dict_round_trip():
    progress = LevelProgress()
    progress.record_completion(_finished())
    progress.advance()

    data = json.loads(json.dumps(progress.to_dict()))
    restored = LevelProgress.from_dict(data)

    assert restored == progress
    assert restored.best_scores == {1: 2000}


def test_from_dict_rejects_garbage():
    with pytest.raises(StateRestoreError):
        LevelProgress.from_dict({"current_level": "abc"})
    with pytest.raises(StateRestoreError):
        LevelProgress.from_dict({"current_level": 99})
