from .aggregation import (
    aggregate,
    build_buckets,
    count_by_bucket,
    group_series,
    number,
    summarize,
)
from .service import ReportService, format_amount

__all__ = [
    "ReportService",
    "aggregate",
    "build_buckets",
    "count_by_bucket",
    "format_amount",
    "group_series",
    "number",
    "summarize",
]
