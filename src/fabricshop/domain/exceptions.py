"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly.  Each class carries a stable
``kind`` string which the boundary reports alongside the message.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    kind = "domain_error"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    kind = "validation"


class NotFoundError(DomainException):
    """A referenced fabric or order does not exist."""

    kind = "not_found"


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the fabric's available quantity."""

    kind = "insufficient_stock"

    def __init__(self, fabric_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for fabric '{fabric_id}' "
            f"(need {requested}, have {available} available)"
        )
        self.fabric_id = fabric_id
        self.requested = requested
        self.available = available


class InvalidTransitionError(ValidationError):
    """An order status change not allowed by the transition table."""

    kind = "invalid_transition"


class InvalidPaymentStatusError(ValidationError):
    """An unrecognized payment status value."""

    kind = "invalid_payment_status"


class OrderCreationError(DomainException):
    """Order creation failed after stock had already been reserved."""

    kind = "order_creation_failed"


class StorageConflictError(DomainException):
    """A concurrent update to the same document was detected."""

    kind = "conflict"


class ReservationSyncError(DomainException):
    """The stock ledger could not be brought in line with a persisted order."""

    kind = "reservation_sync_failed"
