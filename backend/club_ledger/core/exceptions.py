"""
Ledger error taxonomy.

Every error carries the HTTP status it maps to, so the exception handlers in
main.py can translate it into the standard response envelope without the
services knowing about HTTP.

    ValidationFailed    400  malformed or out-of-range input
    InvalidFormat       400  value could not be normalized (money, date)
    NotFound            404  referenced match/booking/entry/setting absent
    PricingUnavailable  500  configuration store is missing a ticket price
    ReferenceExhausted  500  booking reference collided on every attempt
    StorageFault        500  any other persistence failure
"""

from typing import Any, Iterable, Optional


class LedgerError(Exception):
    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.public_message
        self.context = context
        super().__init__(self.message)

    def to_data(self) -> Optional[dict]:
        return None


class ValidationFailed(LedgerError):
    status_code = 400
    public_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        field: Optional[str] = None,
        allowed: Optional[Iterable[Any]] = None,
        **context: Any,
    ):
        super().__init__(message, **context)
        self.field = field
        self.allowed = list(allowed) if allowed is not None else None

    def to_data(self) -> Optional[dict]:
        data = {}
        if self.field:
            data["field"] = self.field
        if self.allowed is not None:
            data["allowed"] = self.allowed
        return data or None


class InvalidFormat(ValidationFailed):
    public_message = "Invalid format"


class NotFound(LedgerError):
    status_code = 404
    public_message = "Not found"


class PricingUnavailable(LedgerError):
    public_message = "Ticket pricing is not configured"


class ReferenceExhausted(LedgerError):
    public_message = "Could not allocate a booking reference, please retry"


class StorageFault(LedgerError):
    public_message = "Storage error"
