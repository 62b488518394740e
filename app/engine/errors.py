from typing import Optional


class EngineError(ValueError):
    """Base class for rejected engine operations.

    Subclasses ValueError so callers that only know the engine raises
    ValueError on bad input keep working.
    """

    def __init__(self, message: str, scenario_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.scenario_id = scenario_id

    def __str__(self) -> str:
        if self.scenario_id is not None:
            return f"[scenario {self.scenario_id}] {self.message}"
        return self.message


class InvalidAmount(EngineError):
    """Stake amount is zero or negative."""

    pass


class AlreadyResolved(EngineError):
    """Scenario has already been resolved."""

    pass


class WindowClosed(EngineError):
    """Betting window has ended."""

    pass


class WindowOpen(EngineError):
    """Betting window has not ended yet."""

    pass


class BelowMinimum(EngineError):
    """Interference amount is below the smallest live bet."""

    pass


class NotResolved(EngineError):
    """Scenario has not been resolved yet."""

    pass


class AlreadyClaimed(EngineError):
    """Winnings for this record were already claimed."""

    pass


class LosingPrediction(EngineError):
    """Record's prediction does not match the declared outcome."""

    pass


class IndexOutOfBounds(EngineError, IndexError):
    """Indexed bettor/interferer lookup past the end of the list."""

    pass


class TransferFailed(EngineError):
    """Credit transfer to the claimant did not complete."""

    pass
