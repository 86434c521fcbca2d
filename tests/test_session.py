import json
import pathlib
import sys
import threading
from dataclasses import replace

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from numbermaster.actions import Action, ActionKind
from numbermaster.errors import StateRestoreError
from numbermaster.session import GameSession, TickTimer
from numbermaster.state import GameState, GameStatus, restore_state, serialize_state
from numbermaster.tiles import Tile


def _grid(values):
    return tuple(tuple(Tile.at(r, c, v) for c, v in enumerate(row)) for r, row in enumerate(values))


def _playing_session(**overrides):
    state = GameState(
        level=1,
        grid=_grid([[5, 5, 3, 1], [7, 2, 8, 4], [6, 9, 1, 2]]),
        time_remaining=120,
        game_status=GameStatus.PLAYING,
    )
    return GameSession(state=replace(state, **overrides), seed=0)


def test_session_starts_in_menu():
    session = GameSession(seed=1)
    assert session.state.game_status == GameStatus.MENU
    assert session.state.grid == ()
    assert session.generation == 0


def test_dispatch_notifies_listeners_on_change_only():
    seen = []
    session = GameSession(seed=1, listeners=[lambda state, action: seen.append((state, action.kind))])

    state = session.dispatch(Action.start(1))
    assert seen == [(state, ActionKind.START_GAME)]
    assert session.generation == 1

    assert session.dispatch(Action.resume()) is state
    assert len(seen) == 1

    session.dispatch(Action.pause())
    assert seen[-1][1] == ActionKind.PAUSE_GAME
    assert session.generation == 1


def test_seeded_sessions_are_reproducible():
    a = GameSession(seed=42).dispatch(Action.start(3))
    b = GameSession(seed=42).dispatch(Action.start(3))
    assert a.grid == b.grid


def test_serialize_restore_round_trip():
    session = _playing_session()
    session.dispatch(Action.select(session.state.grid[0][0]))
    session.dispatch(Action.select(session.state.grid[0][1]))
    session.dispatch(Action.add_row())
    session.dispatch(Action.select(session.state.grid[1][0]))

    data = session.serialize()
    json.dumps(data)

    seen = []
    other = GameSession(listeners=[lambda state, action: seen.append(action)])
    restored = other.restore(json.loads(json.dumps(data)))

    assert restored.state_key() == session.state.state_key()
    assert restored.last_match_animation == session.state.last_match_animation
    assert restored.selected_tile is restored.grid[1][0]
    assert other.generation == 1
    assert seen == [None]


def test_restore_rejects_malformed_data():
    good = serialize_state(_playing_session().state)

    with pytest.raises(StateRestoreError):
        restore_state({})
    with pytest.raises(StateRestoreError):
        restore_state({**good, "version": 99})
    with pytest.raises(StateRestoreError):
        restore_state({**good, "level": 99})
    with pytest.raises(StateRestoreError):
        restore_state({**good, "game_status": "dancing"})
    with pytest.raises(StateRestoreError):
        restore_state({**good, "add_rows_used": 5})
    with pytest.raises(StateRestoreError):
        restore_state({**good, "selected_tile": "7-7"})
    with pytest.raises(StateRestoreError):
        restore_state({**good, "grid": good["grid"][:2] + [good["grid"][2][:3]]})


def test_restore_rejects_matched_selection():
    data = serialize_state(_playing_session().state)
    data["grid"][0][0]["matched"] = True
    data["grid"][0][1]["matched"] = True
    data["matches"] = 1
    data["selected_tile"] = "0-0"
    with pytest.raises(StateRestoreError):
        restore_state(data)


def test_restore_rejects_level_in_play_without_time():
    data = serialize_state(_playing_session().state)
    data["time_remaining"] = 0
    with pytest.raises(StateRestoreError):
        restore_state(data)

    data["game_status"] = "failed"
    assert restore_state(data).game_status == GameStatus.FAILED


def test_restore_rejects_match_count_disagreeing_with_grid():
    data = serialize_state(_playing_session().state)
    data["matches"] = 6
    with pytest.raises(StateRestoreError):
        restore_state(data)

    data["matches"] = 0
    data["grid"][0][0]["matched"] = True
    with pytest.raises(StateRestoreError):
        restore_state(data)


def test_restore_rejects_unfinished_level_at_target():
    data = serialize_state(_playing_session().state)
    for row in data["grid"][:2]:
        for tile in row:
            tile["matched"] = True
    data["matches"] = 4
    assert restore_state(data).matches == 4

    data["add_rows_used"] = 2
    data["grid"].append([{"id": f"3-{c}", "value": 5, "matched": True, "row": 3, "col": c} for c in range(4)])
    data["grid"].append([{"id": f"4-{c}", "value": 5, "matched": True, "row": 4, "col": c} for c in range(4)])
    data["matches"] = 8
    for status in ("playing", "paused"):
        data["game_status"] = status
        with pytest.raises(StateRestoreError):
            restore_state(data)
    data["game_status"] = "completed"
    assert restore_state(data).game_status == GameStatus.COMPLETED


def test_timer_does_not_count_ignored_ticks():
    session = _playing_session(time_remaining=0)
    timer = TickTimer(session)

    assert timer.advance(5) == 0
    assert timer.pending == 0
    assert session.state.time_remaining == 0


def test_timer_is_idle_in_menu():
    session = GameSession(seed=1)
    timer = TickTimer(session)
    assert timer.advance(5) == 0
    assert timer.pending == 0


def test_timer_ticks_once_per_whole_second():
    session = _playing_session()
    timer = TickTimer(session)

    assert timer.advance(0.5) == 0
    assert session.state.time_remaining == 120
    assert timer.advance(0.5) == 1
    assert session.state.time_remaining == 119
    assert timer.advance(2.5) == 2
    assert session.state.time_remaining == 117
    assert timer.pending == 0.5


def test_timer_is_suspended_while_paused():
    session = _playing_session()
    timer = TickTimer(session)
    timer.advance(0.5)

    session.dispatch(Action.pause())
    assert timer.advance(3) == 0
    assert session.state.time_remaining == 120
    assert timer.pending == 0

    session.dispatch(Action.resume())
    assert timer.advance(0.75) == 0
    assert timer.advance(0.25) == 1
    assert session.state.time_remaining == 119


def test_timer_drops_partial_second_when_level_is_replaced():
    session = GameSession(seed=3)
    session.dispatch(Action.start(1))
    timer = TickTimer(session)
    timer.advance(0.75)

    session.dispatch(Action.start(2))
    assert timer.advance(0.5) == 0
    assert session.state.time_remaining == 120
    assert timer.advance(0.5) == 1
    assert session.state.level == 2
    assert session.state.time_remaining == 119


def test_timer_stops_when_level_fails():
    session = _playing_session(time_remaining=2)
    timer = TickTimer(session)

    assert timer.advance(5) == 2
    assert session.state.game_status == GameStatus.FAILED
    assert session.state.time_remaining == 0
    assert timer.pending == 0
    assert timer.advance(5) == 0


def test_timer_rejects_bad_arguments():
    session = GameSession()
    with pytest.raises(ValueError):
        TickTimer(session, interval=0)
    with pytest.raises(ValueError):
        TickTimer(session).advance(-1)


def test_concurrent_dispatch_is_serialized():
    session = _playing_session()

    def worker():
        for _ in range(25):
            session.dispatch(Action.tick())

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert session.state.time_remaining == 20
