"""
Report date ranges.

Bounds are inclusive. A bare calendar date covers the whole day: as a start
it means 00:00:00, as an end it means 23:59:59.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from cashbox.config import DEFAULT_REPORT_WINDOW_DAYS
from cashbox.errors import MissingDateRangeError, ValidationError
from cashbox.models.period import to_server_time

Bound = Union[str, date, datetime, None]

END_OF_DAY = time(23, 59, 59)


@dataclass(frozen=True)
class DateRange:
    """An inclusive [start, end] window in server time."""

    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        return f"{self.start:%Y-%m-%d} to {self.end:%Y-%m-%d}"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {"start": self.start.isoformat(sep=" "), "end": self.end.isoformat(sep=" ")}


def parse_bound(value: Bound, is_end: bool = False) -> Optional[datetime]:
    """
    Normalize one range bound to a naive server-time datetime.

    Args:
        value: "YYYY-MM-DD", an ISO datetime string, a date or a datetime
        is_end: Whether the bound closes the range (bare dates become 23:59:59)

    Returns:
        The normalized datetime, or None when the bound is absent

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if value is None:
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = date.fromisoformat(text)
        except ValueError:
            try:
                value = datetime.fromisoformat(text)
            except ValueError:
                raise ValidationError(
                    f"Invalid date {value!r}. Use YYYY-MM-DD or YYYY-MM-DD HH:MM:SS."
                ) from None

    if isinstance(value, datetime):
        return to_server_time(value)
    if isinstance(value, date):
        return datetime.combine(value, END_OF_DAY if is_end else time.min)

    raise ValidationError(f"Invalid date: {value!r}")


def resolve_range(
    start: Bound, end: Bound, required: bool = True
) -> Optional[DateRange]:
    """
    Resolve a pair of bounds into an inclusive DateRange.

    Args:
        start: Range start
        end: Range end
        required: Whether omitting both bounds is an error

    Returns:
        The DateRange, or None when both bounds are absent and not required

    Raises:
        MissingDateRangeError: If only one bound is given, or none when required
        ValidationError: If a bound is unparseable or start is after end
    """
    start_at = parse_bound(start)
    end_at = parse_bound(end, is_end=True)

    if start_at is None and end_at is None and not required:
        return None
    if start_at is None or end_at is None:
        raise MissingDateRangeError("Both a start date and an end date are required")
    if start_at > end_at:
        raise ValidationError(
            f"Start date {start_at:%Y-%m-%d %H:%M:%S} is after "
            f"end date {end_at:%Y-%m-%d %H:%M:%S}"
        )
    return DateRange(start_at, end_at)


def trailing_window(
    days: int = DEFAULT_REPORT_WINDOW_DAYS, today: Optional[date] = None
) -> DateRange:
    """The window from the start of the day ``days`` ago to the end of today."""
    today = today or date.today()
    return DateRange(
        datetime.combine(today - timedelta(days=days), time.min),
        datetime.combine(today, END_OF_DAY),
    )
