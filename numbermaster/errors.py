class NumberMasterError(Exception):
    """Base class for errors raised by the Number Master engine."""


class LevelOutOfRangeError(NumberMasterError, ValueError):
    def __init__(self, level: object, max_level: int) -> None:
        super().__init__(f"level out of range: {level!r} (expected 1..{max_level})")
        self.level = level
        self.max_level = max_level


class StateRestoreError(NumberMasterError, ValueError):
    """Persisted game data could not be turned back into a GameState."""
