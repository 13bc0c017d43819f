"""
Cashbox - clinic back-office ledger and reports

Records cashbox transactions against the service catalog and builds
time-bucketed expense, appointment and revenue reports.
"""

from .config import VERSION
from .db import CashboxRepository
from .errors import (
    CashboxError,
    ErrorKind,
    InvalidPeriodError,
    MissingDateRangeError,
    StoreError,
    ValidationError,
)
from .models import GroupSeries, Period, ReportBucket
from .services import ExportService, ReportService

__version__ = VERSION

__all__ = [
    "CashboxError",
    "CashboxRepository",
    "ErrorKind",
    "ExportService",
    "GroupSeries",
    "InvalidPeriodError",
    "MissingDateRangeError",
    "Period",
    "ReportBucket",
    "ReportService",
    "StoreError",
    "ValidationError",
]
