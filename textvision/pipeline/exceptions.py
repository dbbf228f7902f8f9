class StrategyError(Exception):
    """Base exception for a strategy that did not produce a result."""


class StrategyDeclinedError(StrategyError):
    """Raised when a strategy ran cleanly but its result is not good enough to keep."""


class StrategyUnavailableError(StrategyError):
    """Raised when a strategy's collaborator cannot work on this document."""
