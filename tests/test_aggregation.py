"""Tests for the pure report aggregation primitives."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from operator import attrgetter

from cashbox.services.reports import (
    aggregate,
    build_buckets,
    group_series,
    number,
    summarize,
)


@dataclass
class Row:
    at: datetime
    key: str
    value: Decimal
    group: int = 1
    label: str = "Group"


ROWS = [
    Row(datetime(2024, 1, 1, 9), "cash", Decimal("10"), 2, "Cleaning"),
    Row(datetime(2024, 1, 2, 9), "card", Decimal("5.50"), 1, "Consultation"),
    Row(datetime(2024, 1, 2, 18), "cash", Decimal("4.50"), 1, "Consultation"),
    Row(datetime(2024, 2, 1, 9), "cash", Decimal("1"), 2, "Cleaning"),
]

FIELDS = dict(
    timestamp_of=attrgetter("at"),
    key_of=attrgetter("key"),
    value_of=attrgetter("value"),
)


class TestAggregate:
    """Test aggregate and summarize."""

    def test_sums_per_bucket_and_key(self):
        grouped = aggregate(ROWS, "monthly", **FIELDS)

        assert grouped == {
            "2024-01": {"cash": Decimal("14.50"), "card": Decimal("5.50")},
            "2024-02": {"cash": Decimal("1")},
        }

    def test_summarize_orders_buckets_descending(self):
        buckets = summarize({"2024-01": {"a": 1}, "2024-03": {"a": 2}, "2024-02": {}})
        assert [b.bucket_key for b in buckets] == ["2024-03", "2024-02", "2024-01"]

    def test_buckets_partition_rows(self):
        buckets = build_buckets(ROWS, "daily", **FIELDS)

        assert sum(b.count for b in buckets) == len(ROWS)
        assert sum(b.total for b in buckets) == sum(r.value for r in ROWS)

    def test_empty_input(self):
        assert build_buckets([], "daily", **FIELDS) == []
        assert group_series([], "daily", **FIELDS, group_of=int, label_of=str) == []


class TestNumber:
    """Test sequence numbering."""

    def test_sequence_follows_emission_order(self):
        buckets = number(build_buckets(ROWS, "daily", **FIELDS))
        assert [b.sequence_id for b in buckets] == ["R1", "R2", "R3"]
        assert buckets[0].to_dict()["sequence_id"] == "R1"


class TestGroupSeries:
    """Test group_series."""

    def test_groups_sorted_by_key_with_own_series(self):
        series = group_series(
            ROWS,
            "monthly",
            **FIELDS,
            group_of=attrgetter("group"),
            label_of=attrgetter("label"),
        )

        assert [(s.group_key, s.label) for s in series] == [
            (1, "Consultation"),
            (2, "Cleaning"),
        ]
        assert [b.bucket_key for b in series[1].series] == ["2024-02", "2024-01"]
        assert series[0].total == Decimal("10.00")
        assert series[0].series[0].subtotals == {
            "card": Decimal("5.50"),
            "cash": Decimal("4.50"),
        }
