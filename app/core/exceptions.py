"""
Typed exception hierarchy for the billing API.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer answers with. Handlers catch by type, never by message text.

    BillingError
    +-- ValidationError       400
    +-- NotFound              404
    +-- Conflict              400
    +-- InsufficientHours     400
    +-- HasDependents         400
    +-- Unauthorized          401
    +-- Forbidden             403
    +-- StorageError          500
"""
from decimal import Decimal
from typing import Optional


class BillingError(Exception):
    """Base class for all domain errors."""

    code: str = "billing_error"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BillingError):
    """Missing or malformed required fields."""

    code = "validation_error"
    status_code = 400


class NotFound(BillingError):
    """A referenced record does not exist."""

    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[int] = None, message: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} not found")


class Conflict(BillingError):
    """A uniqueness rule would be broken (contract number, category name, username)."""

    code = "conflict"
    status_code = 400


class InsufficientHours(BillingError):
    """A time entry would push a contract past its hour budget."""

    code = "insufficient_hours"
    status_code = 400

    def __init__(self, remaining_hours: Decimal, message: Optional[str] = None):
        self.remaining_hours = remaining_hours
        super().__init__(
            message or f"Not enough hours available. Remaining: {_format_hours(remaining_hours)}h"
        )


class HasDependents(BillingError):
    """A delete is blocked by records that still reference the target."""

    code = "has_dependents"
    status_code = 400


class Unauthorized(BillingError):
    """Missing, unknown or expired session."""

    code = "unauthorized"
    status_code = 401


class Forbidden(BillingError):
    """The caller's role lacks the required permission."""

    code = "forbidden"
    status_code = 403


class StorageError(BillingError):
    """A persisted collection could not be read or written."""

    code = "storage_error"
    status_code = 500


def _format_hours(value: Decimal) -> str:
    # 4.00 -> "4", 2.50 -> "2.5"
    return format(Decimal(value).normalize(), "f")
