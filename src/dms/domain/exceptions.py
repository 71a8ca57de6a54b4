"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly.  Each class carries a
``kind`` string that adapters expose as the machine-readable error type.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    kind = "DomainError"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    kind = "ValidationError"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = "NotFound"


class InsufficientStockError(ValidationError):
    """A reservation asked for more than the record has available."""

    kind = "InsufficientStock"

    def __init__(self, item_id: str, item_code: str, available: int, requested: int) -> None:
        self.item_id = item_id
        self.item_code = item_code
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {item_code}. "
            f"Available: {available}, Required: {requested}"
        )


class UnsupportedOperationError(DomainException):
    """The requested change is not supported on this aggregate."""

    kind = "UnsupportedOperation"


class PersistenceError(DomainException):
    """The underlying store failed to read or write."""

    kind = "PersistenceError"


class ConcurrencyConflictError(PersistenceError):
    """A compare-and-swap write lost against a concurrent writer."""


class CompensationError(PersistenceError):
    """Undoing a partial stock change failed.

    ``unrecovered`` lists the movements still applied to the ledger, so
    stock and dispatch records disagree by exactly those quantities.  The
    error that triggered the compensation is chained as ``__cause__``.
    """

    def __init__(self, message: str, unrecovered: list) -> None:
        self.unrecovered = unrecovered
        super().__init__(message)
