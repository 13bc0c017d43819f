from .amount_parser import AmountParser
from .date_range import DateRange, parse_bound, resolve_range, trailing_window
from .export import ExportFormat, ExportService
from .reports import ReportService

__all__ = [
    "AmountParser",
    "DateRange",
    "ExportFormat",
    "ExportService",
    "ReportService",
    "parse_bound",
    "resolve_range",
    "trailing_window",
]
