"""Error kinds surfaced by the league store and the simulation core."""

from __future__ import annotations


class SbasimError(RuntimeError):
    """Base class; ``kind`` is the stable identifier reported to API callers."""

    kind = "error"
    retryable = False


class NotFound(SbasimError):
    kind = "not_found"


class AlreadySimulated(SbasimError):
    kind = "already_simulated"


class TransactionConflict(SbasimError):
    """The store could not commit every write of a unit of work."""

    kind = "transaction_conflict"
    retryable = True


class InvalidRoster(SbasimError):
    kind = "invalid_roster"


class ValidationFailed(SbasimError):
    kind = "validation_failed"


class ImmutableRecord(ValidationFailed):
    """Raised when a write would alter simulated history."""

    kind = "immutable_record"


__all__ = [
    "AlreadySimulated",
    "ImmutableRecord",
    "InvalidRoster",
    "NotFound",
    "SbasimError",
    "TransactionConflict",
    "ValidationFailed",
]
