"""
Domain errors raised by the service layer.

Every error carries the HTTP status and a short machine-readable code so the
exception handler in ``main.py`` can render it with ``error_response`` without
knowing about individual error types.
"""

from typing import Any, Optional


class TicketingError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 400
    error_code = "ticketing_error"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(TicketingError):
    status_code = 404
    error_code = "not_found"

    def __init__(self, resource: str = "Resource", details: Any = None):
        super().__init__(f"{resource} not found", details)
        self.resource = resource


class ValidationError(TicketingError):
    status_code = 400
    error_code = "validation_error"


class InsufficientStockError(TicketingError):
    status_code = 409
    error_code = "insufficient_stock"

    def __init__(self, remaining: int, requested: Optional[int] = None):
        if remaining == 0:
            message = "Tickets of this type are sold out"
        else:
            message = f"Insufficient stock. Only {remaining} ticket{'s' if remaining != 1 else ''} left"
        super().__init__(message, {"remaining": remaining, "requested": requested})
        self.remaining = remaining
        self.requested = requested


class InvalidStatusTransitionError(TicketingError):
    status_code = 409
    error_code = "invalid_status_transition"

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Order is already {current} and cannot be moved to {target}",
            {"current_status": current, "target_status": target},
        )
        self.current = current
        self.target = target


class DependentRecordsError(TicketingError):
    status_code = 400
    error_code = "has_dependent_records"


class PermissionDeniedError(TicketingError):
    status_code = 403
    error_code = "forbidden"

    def __init__(self, message: str = "You do not have access to this resource"):
        super().__init__(message)
