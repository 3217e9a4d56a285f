"""
Parlor Games - Engine Errors

Exception hierarchy raised by the game engine. Every failure is raised
before any state is mutated, so callers can correct the input or the
call ordering and retry.
"""


class GameError(Exception):
    """Base exception for all engine errors."""


class ValidationError(GameError, ValueError):
    """Raised for malformed input: bad player names, out-of-range choices."""


class StateError(GameError):
    """Raised when an operation is invoked in the wrong lifecycle state."""


class NotFoundError(GameError, LookupError):
    """Raised for unknown game identifiers or player ids."""
