"""
Error types raised by the progression engine and the schedule store.
"""


class MatchdayError(Exception):
    """Base class for all engine errors."""


class ValidationError(MatchdayError, ValueError):
    """Malformed operator input or a write that would break a record invariant."""


class AuthorizationError(MatchdayError, PermissionError):
    """The acting operator may not control this match."""


class ConsistencyError(MatchdayError):
    """The target record is gone or no longer in a state that allows the action."""


class TransientStoreError(MatchdayError):
    """A store write failed. Nothing was applied; the caller must repeat the action."""
