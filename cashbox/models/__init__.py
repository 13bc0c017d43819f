from .period import Period, bucket_key, to_server_time
from .report import GroupSeries, Number, ReportBucket

__all__ = [
    "GroupSeries",
    "Number",
    "Period",
    "ReportBucket",
    "bucket_key",
    "to_server_time",
]
