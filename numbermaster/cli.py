from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .actions import Action
from .levels import MAX_LEVEL
from .progress import LevelProgress
from .session import GameSession
from .state import GameState, GameStatus
from .tiles import find_available_match

logger = logging.getLogger(__name__)


def _choose_actions(state: GameState) -> List[Action]:
    pair = find_available_match(state.grid)
    if pair is not None:
        first, second = pair
        return [Action.select(first), Action.select(second)]
    if state.add_rows_used < state.config.add_rows_allowed:
        return [Action.add_row()]
    return [Action.tick()]


def run_game(level: int = 1, seed: Optional[int] = None, max_steps: int = 10_000) -> GameState:
    """Play one level with a greedy bot that takes the first pair it can find.

    When no pair is left it adds a row if allowed, otherwise it lets the clock
    run. Every match is followed by one second of thinking time.
    """
    session = GameSession(seed=seed)
    session.dispatch(Action.start(level))
    for _ in range(max_steps):
        state = session.state
        if state.game_status != GameStatus.PLAYING:
            break
        actions = _choose_actions(state)
        logger.debug("bot at %ds: %s", state.time_remaining, ", ".join(a.kind.value for a in actions))
        for action in actions:
            session.dispatch(action)
        if len(actions) == 2 and session.state.game_status == GameStatus.PLAYING:
            session.dispatch(Action.tick())
    return session.state


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run a Number Master level with a greedy bot, or open the GUI.")
    parser.add_argument("--level", type=int, default=1, help=f"Level to play (1..{MAX_LEVEL}).")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible grids.")
    parser.add_argument("--max-steps", type=int, default=10_000, help="Upper bound on bot decisions.")
    parser.add_argument("--verbose", action="store_true", help="Log every ignored action and transition.")
    parser.add_argument("--gui", action="store_true", help="Open the pygame window instead of simulating.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if not 1 <= args.level <= MAX_LEVEL:
        parser.error(f"--level must be within 1..{MAX_LEVEL}")

    if args.gui:
        from .gui import launch_gui

        launch_gui(level=args.level, seed=args.seed)
        return

    state = run_game(level=args.level, seed=args.seed, max_steps=args.max_steps)
    config = state.config
    print(f"Level {state.level} ({config.difficulty.value}): {state.game_status.value}")
    print(f"Matches: {state.matches}/{config.target_matches}")
    print(f"Score: {state.score}")
    print(f"Time left: {state.time_remaining}s, rows added: {state.add_rows_used}/{config.add_rows_allowed}")
    if state.game_status == GameStatus.COMPLETED:
        result = LevelProgress().record_completion(state)
        print(f"Stars: {result.stars}")


if __name__ == "__main__":
    main()
