"""
Report aggregation primitives.

Every report is built from the same steps: bucket each row by period, group
by (bucket, key) and sum a value. The grouped variants partition rows by an
entity (a service, say) first and run the same steps per partition. These
functions are pure; they never touch the store.
"""

from collections import defaultdict
from datetime import datetime
from typing import Callable, Hashable, Iterable, TypeVar, Union

from cashbox.config import REPORT_SEQUENCE_PREFIX
from cashbox.models import GroupSeries, Number, Period, ReportBucket, bucket_key

Row = TypeVar("Row")


def aggregate(
    rows: Iterable[Row],
    period: Union[str, Period],
    timestamp_of: Callable[[Row], datetime],
    key_of: Callable[[Row], str],
    value_of: Callable[[Row], Number],
) -> dict[str, dict[str, Number]]:
    """
    Bucket rows by period and sum values per (bucket, key).

    Returns:
        ``{bucket_key: {key: sum}}``
    """
    period = Period.parse(period)
    grouped: dict[str, dict[str, Number]] = defaultdict(lambda: defaultdict(int))
    for row in rows:
        grouped[bucket_key(timestamp_of(row), period)][key_of(row)] += value_of(row)
    return {bucket: dict(sums) for bucket, sums in grouped.items()}


def count_by_bucket(
    rows: Iterable[Row],
    period: Union[str, Period],
    timestamp_of: Callable[[Row], datetime],
) -> dict[str, int]:
    """Number of rows per bucket."""
    period = Period.parse(period)
    counts: dict[str, int] = defaultdict(int)
    for row in rows:
        counts[bucket_key(timestamp_of(row), period)] += 1
    return dict(counts)


def summarize(
    grouped: dict[str, dict[str, Number]],
    counts: dict[str, int] = None,
) -> list[ReportBucket]:
    """Turn grouped sums into ReportBuckets, most recent bucket first."""
    counts = counts or {}
    return [
        ReportBucket(
            bucket_key=key,
            subtotals=dict(sorted(grouped[key].items())),
            count=counts.get(key, 0),
        )
        for key in sorted(grouped, reverse=True)
    ]


def number(
    buckets: list[ReportBucket], prefix: str = REPORT_SEQUENCE_PREFIX
) -> list[ReportBucket]:
    """Attach sequence ids R1..Rn in emission order."""
    for index, bucket in enumerate(buckets, start=1):
        bucket.sequence_id = f"{prefix}{index}"
    return buckets


def build_buckets(
    rows: Iterable[Row],
    period: Union[str, Period],
    timestamp_of: Callable[[Row], datetime],
    key_of: Callable[[Row], str],
    value_of: Callable[[Row], Number],
) -> list[ReportBucket]:
    """aggregate + summarize, with per-bucket row counts."""
    rows = list(rows)
    return summarize(
        aggregate(rows, period, timestamp_of, key_of, value_of),
        count_by_bucket(rows, period, timestamp_of),
    )


def group_series(
    rows: Iterable[Row],
    period: Union[str, Period],
    timestamp_of: Callable[[Row], datetime],
    key_of: Callable[[Row], str],
    value_of: Callable[[Row], Number],
    group_of: Callable[[Row], Hashable],
    label_of: Callable[[Row], str],
) -> list[GroupSeries]:
    """
    Partition rows by group entity and build a bucket series per group.

    Groups are ordered by group key; each series is most recent first.
    """
    period = Period.parse(period)
    partitions: dict[Hashable, list[Row]] = defaultdict(list)
    labels: dict[Hashable, str] = {}
    for row in rows:
        group = group_of(row)
        partitions[group].append(row)
        labels.setdefault(group, label_of(row))

    return [
        GroupSeries(
            group_key=group,
            label=labels[group],
            series=build_buckets(
                partitions[group], period, timestamp_of, key_of, value_of
            ),
        )
        for group in sorted(partitions)
    ]
