import pathlib
import sys
from dataclasses import replace

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from numbermaster.levels import get_level_config
from numbermaster.scoring import calculate_score, star_rating


def test_score_examples():
    assert calculate_score(1, 120, 1) == 1300
    assert calculate_score(5, 90, 1) == 1400
    assert calculate_score(8, 60, 2) == 2800
    assert calculate_score(12, 30, 3) == 4500


def test_time_bonus_is_floored():
    assert calculate_score(0, 1.25, 1) == 12


def test_score_is_monotonic_and_linear_in_level():
    for level in (1, 2, 5):
        for matches in range(0, 12):
            for time in range(0, 130, 7):
                score = calculate_score(matches, time, level)
                assert score >= 0
                assert score <= calculate_score(matches + 1, time, level)
                assert score <= calculate_score(matches, time + 1, level)
        assert calculate_score(3, 40, level) == calculate_score(3, 40, 1) * level


def test_add_row_penalty_and_zero_floor():
    assert calculate_score(1, 120, 1, add_rows_used=1) == 1250
    assert calculate_score(0, 0, 3, add_rows_used=2) == 0


def test_star_rating_bands():
    config = get_level_config(1)
    assert star_rating(8, 120, 0, config) == 3
    assert star_rating(8, 60, 0, config) == 2
    assert star_rating(8, 30, 1, config) == 1


def test_star_rating_penalises_spent_rows():
    config = get_level_config(1)
    assert star_rating(8, 120, 2, config) == 1


def test_star_rating_without_add_row_allowance():
    config = replace(get_level_config(1), add_rows_allowed=0)
    assert star_rating(8, 120, 0, config) == 3
