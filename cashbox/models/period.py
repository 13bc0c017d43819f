"""
Report periods and the bucketing rules behind them.

Every report (expenses, appointments, cashbox revenue) buckets timestamps
through ``bucket_key`` so the day/week/month/year logic lives in one place.
Period tokens never reach SQL text.
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Union

from cashbox.errors import InvalidPeriodError


class Period(str, Enum):
    """Report granularity."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, token: Union[str, "Period"]) -> "Period":
        """
        Parse a period token (case-insensitive).

        Raises:
            InvalidPeriodError: If the token is not a known period
        """
        if isinstance(token, Period):
            return token
        if not isinstance(token, str):
            raise InvalidPeriodError(token)
        try:
            return cls(token.strip().lower())
        except ValueError:
            raise InvalidPeriodError(token) from None

    @property
    def label(self) -> str:
        return self.value.title()


def to_server_time(timestamp: datetime) -> datetime:
    """Convert an aware timestamp to naive server-local time."""
    if timestamp.tzinfo is not None:
        return timestamp.astimezone().replace(tzinfo=None)
    return timestamp


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


# Keys are zero-padded so lexicographic order equals time order
_BUCKET_RULES: dict[Period, Callable[[date], str]] = {
    Period.DAILY: lambda day: day.isoformat(),
    Period.WEEKLY: lambda day: _week_start(day).isoformat(),
    Period.MONTHLY: lambda day: f"{day.year:04d}-{day.month:02d}",
    Period.YEARLY: lambda day: f"{day.year:04d}",
}


def bucket_key(timestamp: Union[date, datetime], period: Union[str, Period]) -> str:
    """
    Map a timestamp to the canonical key of the period instance containing it.

    Args:
        timestamp: Date or datetime (aware datetimes are converted to server time)
        period: Period or period token

    Returns:
        Canonical key, e.g. "2024-01-15" (daily/weekly), "2024-01", "2024"
    """
    period = Period.parse(period)
    if isinstance(timestamp, datetime):
        day = to_server_time(timestamp).date()
    else:
        day = timestamp
    return _BUCKET_RULES[period](day)
