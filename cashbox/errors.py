"""
Error types for the cashbox ledger and reports.

Every failure carries an ``ErrorKind`` so callers dispatch on the kind
instead of matching message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Stable, distinguishable failure kinds."""

    VALIDATION = "validation"
    INVALID_PERIOD = "invalid_period"
    MISSING_DATE_RANGE = "missing_date_range"
    NOT_FOUND = "not_found"
    STORE = "store"


class CashboxError(Exception):
    """Base class for all cashbox failures."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {"kind": self.kind.value, "message": self.message}


class ValidationError(CashboxError):
    """Malformed or missing required input."""

    kind = ErrorKind.VALIDATION


class InvalidPeriodError(CashboxError):
    """Unrecognized period token."""

    kind = ErrorKind.INVALID_PERIOD

    def __init__(self, token):
        super().__init__(
            f"Invalid period {token!r}. Must be one of daily, weekly, monthly, yearly."
        )
        self.token = token


class MissingDateRangeError(CashboxError):
    """A range-dependent report was called without both bounds."""

    kind = ErrorKind.MISSING_DATE_RANGE


class StoreError(CashboxError):
    """Underlying store failure; the active transaction has been rolled back."""

    kind = ErrorKind.STORE
