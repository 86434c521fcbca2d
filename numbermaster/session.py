from __future__ import annotations

import logging
import random
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Optional

from .actions import SESSION_REPLACING, Action
from .engine import apply_action
from .state import GameState, GameStatus, menu_state, restore_state, serialize_state

logger = logging.getLogger(__name__)

Listener = Callable[[GameState, Optional[Action]], None]


class GameSession:
    """Owns the single live GameState and applies actions to it one at a time.

    Listeners are called with the new state and the action that produced it
    (``None`` after a restore) whenever the state object changes.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        seed: Optional[int] = None,
        listeners: Iterable[Listener] = (),
    ) -> None:
        self._state = state or menu_state()
        self._rng = random.Random(seed)
        self._listeners: List[Listener] = list(listeners)
        self._lock = RLock()
        self._generation = 0

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def generation(self) -> int:
        """Incremented every time the level state is replaced wholesale."""
        return self._generation

    def dispatch(self, action: Action) -> GameState:
        with self._lock:
            previous = self._state
            new_state = apply_action(previous, action, self._rng)
            if new_state is previous:
                return previous
            self._state = new_state
            if getattr(action, "kind", None) in SESSION_REPLACING:
                self._generation += 1
                logger.info("level %d started", new_state.level)
            self._log_outcome(previous, new_state)
            self._notify(new_state, action)
            return new_state

    def serialize(self) -> Dict[str, Any]:
        with self._lock:
            return serialize_state(self._state)

    def restore(self, data: Dict[str, Any]) -> GameState:
        state = restore_state(data)
        with self._lock:
            self._state = state
            self._generation += 1
            logger.info("restored level %d (%s)", state.level, state.game_status.value)
            self._notify(state, None)
            return state

    def _log_outcome(self, previous: GameState, new_state: GameState) -> None:
        if new_state.game_status == previous.game_status:
            return
        if new_state.game_status == GameStatus.COMPLETED:
            logger.info("level %d completed with score %d", new_state.level, new_state.score)
        elif new_state.game_status == GameStatus.FAILED:
            logger.info("level %d failed after %d matches", new_state.level, new_state.matches)

    def _notify(self, state: GameState, action: Optional[Action]) -> None:
        for listener in self._listeners:
            listener(state, action)


class TickTimer:
    """Turns elapsed wall time into TICK_TIMER actions for a session.

    The owner of the UI loop calls ``advance`` with the seconds elapsed since the
    previous call. Time only accumulates while the session is playing, and a
    partial second is dropped whenever the session's level state is replaced.
    """

    def __init__(self, session: GameSession, interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError("tick interval must be positive")
        self._session = session
        self._interval = interval
        self._elapsed = 0.0
        self._generation = session.generation

    @property
    def pending(self) -> float:
        return self._elapsed

    def advance(self, seconds: float) -> int:
        if seconds < 0:
            raise ValueError("elapsed time must be non-negative")
        session = self._session
        if session.generation != self._generation:
            self._generation = session.generation
            self._elapsed = 0.0
        if session.state.game_status != GameStatus.PLAYING:
            self._elapsed = 0.0
            return 0

        self._elapsed += seconds
        ticks = 0
        while self._elapsed >= self._interval:
            self._elapsed -= self._interval
            previous = session.state
            if session.dispatch(Action.tick()) is previous:
                self._elapsed = 0.0
                break
            ticks += 1
            if session.state.game_status != GameStatus.PLAYING or session.generation != self._generation:
                self._elapsed = 0.0
                self._generation = session.generation
                break
        return ticks
