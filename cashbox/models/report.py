"""
Report result models.

These are computed views built fresh for each report request and never
persisted.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Union

Number = Union[Decimal, int]


@dataclass
class ReportBucket:
    """
    One period instance of a report.

    ``total`` is derived from ``subtotals`` so a bucket total always equals
    the sum of its breakdown.
    """

    bucket_key: str
    subtotals: dict[str, Number] = field(default_factory=dict)
    count: int = 0  # source rows that fell into this bucket
    sequence_id: Optional[str] = None

    @property
    def total(self) -> Number:
        return sum(self.subtotals.values())

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        data = {
            "bucket_key": self.bucket_key,
            "total": self.total,
            "count": self.count,
            "subtotals": dict(self.subtotals),
        }
        if self.sequence_id is not None:
            data = {"sequence_id": self.sequence_id, **data}
        return data

    def to_summary_dict(self) -> dict:
        """Flat date-range view with a per-category breakdown."""
        return {
            "sequence_id": self.sequence_id,
            "bucket_key": self.bucket_key,
            "total": self.total,
            "categories_summary": dict(self.subtotals),
        }

    def to_cashbox_dict(self) -> dict:
        return {
            "bucket_key": self.bucket_key,
            "total_amount": self.total,
            "transaction_count": self.count,
            "subtotals": dict(self.subtotals),
        }


@dataclass
class GroupSeries:
    """A per-period series for one grouping entity (service, category...)."""

    group_key: Union[int, str]
    label: str
    series: list[ReportBucket] = field(default_factory=list)

    @property
    def total(self) -> Number:
        return sum(bucket.total for bucket in self.series)

    @property
    def count(self) -> int:
        return sum(bucket.count for bucket in self.series)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "group_key": self.group_key,
            "label": self.label,
            "series": [bucket.to_dict() for bucket in self.series],
        }

    def to_cashbox_dict(self) -> dict:
        """Cashbox view: the group is a service."""
        return {
            "service_id": self.group_key,
            "service_title": self.label,
            "series": [bucket.to_cashbox_dict() for bucket in self.series],
        }
