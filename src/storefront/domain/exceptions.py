"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so outer layers (the service envelope, the CLI) can catch them uniformly.
Each subclass carries a machine-readable ``kind`` that callers map to their
own status codes.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    kind = "domain"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    kind = "validation"


class NotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = "not_found"


class InsufficientStockError(DomainException):
    """A cart line asks for more units than the index holds."""

    kind = "insufficient_stock"

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(requested {requested}, available {available})"
        )


class PermissionDeniedError(DomainException):
    """The acting identity may not touch the requested resource."""

    kind = "permission"


class InvalidTransitionError(DomainException):
    """An order status change is not allowed by the state machine."""

    kind = "invalid_transition"


class PersistenceError(DomainException):
    """The store of record failed; the transaction was rolled back."""

    kind = "persistence"


class ConfigurationError(DomainException):
    """A setting or a configured option (e.g. shipping mode) is unknown."""

    kind = "configuration"


class ConflictError(DomainException):
    """The change clashes with data that depends on the entity."""

    kind = "conflict"
