"""
Report service for the clinic back office.

Provides functionality for:
- Expense reports by period or date range, broken down by category
- Appointment reports per service, broken down by visit status
- Cashbox revenue reports per service, broken down by payment method
- Chart rendering and chat formatting of any report
"""

import io
import logging
from decimal import Decimal
from operator import attrgetter
from typing import Optional, Union

import matplotlib
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.ticker import FuncFormatter

from cashbox.config import (
    CHART_DPI,
    CHART_FORMAT,
    CHART_HEIGHT,
    CHART_WIDTH,
    DISCORD_MESSAGE_MAX_LENGTH,
)
from cashbox.db.models import Appointment
from cashbox.db.queries import QueryRepository
from cashbox.models import GroupSeries, Number, Period, ReportBucket
from cashbox.services.date_range import (
    Bound,
    DateRange,
    parse_bound,
    resolve_range,
    trailing_window,
)

from .aggregation import build_buckets, group_series, number

# Use non-interactive backend for Discord bot
matplotlib.use("Agg")

logger = logging.getLogger(__name__)

Report = Union[list[ReportBucket], list[GroupSeries]]

_TRUNCATION_NOTE = "_Report truncated. Use /export_report for the full data._"


def format_amount(value: Number) -> str:
    """Thousands-separated amount; cents only when present."""
    if isinstance(value, Decimal) and value != value.to_integral_value():
        return f"{value:,.2f}"
    return f"{value:,.0f}"


def _bounds(window: Optional[DateRange]):
    return (window.start, window.end) if window else (None, None)


class ReportService:
    """Service for building, charting and formatting periodic reports."""

    def __init__(self, queries: QueryRepository):
        """
        Initialize the report service.

        Args:
            queries: Read-only repository for report inputs
        """
        self.queries = queries

        try:
            sns.set_theme(style="darkgrid")
            logger.info("ReportService initialized successfully")
        except Exception as e:
            logger.warning(f"Failed to set seaborn theme: {e}")

    # =========================================================================
    # Expense Reports
    # =========================================================================

    def expense_report(
        self,
        period: Union[str, Period],
        start: Bound = None,
        end: Bound = None,
    ) -> list[ReportBucket]:
        """
        Expense totals per period with category subtotals.

        Args:
            period: daily, weekly, monthly or yearly
            start: Optional range start (requires end)
            end: Optional range end (requires start)

        Returns:
            Buckets, most recent first, numbered R1..Rn

        Raises:
            InvalidPeriodError: If the period token is unknown
            MissingDateRangeError: If exactly one bound is given
        """
        period = Period.parse(period)
        window = resolve_range(start, end, required=False)

        expenses = self.queries.get_expenses(*_bounds(window))
        buckets = number(
            build_buckets(
                expenses,
                period,
                timestamp_of=attrgetter("created_at"),
                key_of=attrgetter("category"),
                value_of=attrgetter("amount"),
            )
        )
        logger.debug(
            f"Expense report ({period.value}): {len(expenses)} expenses "
            f"in {len(buckets)} buckets"
        )
        return buckets

    def expense_report_by_date_range(
        self, start: Bound, end: Bound
    ) -> list[ReportBucket]:
        """
        Daily expense totals with category subtotals for a required range.

        Raises:
            MissingDateRangeError: If either bound is missing
        """
        window = resolve_range(start, end, required=True)
        return self.expense_report(Period.DAILY, window.start, window.end)

    # =========================================================================
    # Appointment Reports
    # =========================================================================

    def appointment_report(self, period: Union[str, Period]) -> list[GroupSeries]:
        """
        Visit counts per service and period, with status subtotals.

        Returns:
            One series per service label, ordered by label
        """
        period = Period.parse(period)

        appointments = self.queries.get_appointments()
        series = group_series(
            appointments,
            period,
            timestamp_of=attrgetter("appointment_at"),
            key_of=attrgetter("status"),
            value_of=lambda _: 1,
            group_of=attrgetter("service"),
            label_of=attrgetter("service"),
        )
        logger.debug(
            f"Appointment report ({period.value}): {len(appointments)} visits "
            f"across {len(series)} services"
        )
        return series

    def appointments_in_range(self, start: Bound, end: Bound) -> list[Appointment]:
        """Raw appointments in a required range, most recent first."""
        window = resolve_range(start, end, required=True)
        return self.queries.get_appointments(window.start, window.end)

    # =========================================================================
    # Cashbox Reports
    # =========================================================================

    @staticmethod
    def cashbox_window(start: Bound = None, end: Bound = None) -> DateRange:
        """The cashbox report range, or the trailing window when a bound is missing."""
        start_at = parse_bound(start)
        end_at = parse_bound(end, is_end=True)
        if start_at is None or end_at is None:
            return trailing_window()
        return resolve_range(start_at, end_at, required=True)

    def cashbox_report(
        self,
        period: Union[str, Period],
        start: Bound = None,
        end: Bound = None,
    ) -> list[GroupSeries]:
        """
        Revenue per service and period, with payment-method subtotals.

        A transaction linked to several services counts its full amount under
        each of them. Without both bounds the trailing 30-day window is used.

        Returns:
            One series per service (group_key=service id, label=title)
        """
        period = Period.parse(period)
        window = self.cashbox_window(start, end)

        rows = self.queries.get_cashbox_rows(window.start, window.end)
        series = group_series(
            rows,
            period,
            timestamp_of=attrgetter("created_at"),
            key_of=attrgetter("payment_method"),
            value_of=attrgetter("amount"),
            group_of=attrgetter("service_id"),
            label_of=attrgetter("service_title"),
        )
        logger.debug(
            f"Cashbox report ({period.value}, {window.label}): {len(rows)} rows "
            f"across {len(series)} services"
        )
        return series

    def cashbox_report_by_date_range(
        self, start: Bound, end: Bound
    ) -> list[GroupSeries]:
        """Daily cashbox report for a required range."""
        window = resolve_range(start, end, required=True)
        return self.cashbox_report(Period.DAILY, window.start, window.end)

    # =========================================================================
    # Rendering
    # =========================================================================

    def generate_report_chart(self, report: Report, title: str) -> io.BytesIO:
        """
        Render a report as a PNG chart.

        Flat reports become one bar per bucket; grouped reports become one
        line per group.

        Args:
            report: Output of any report operation
            title: Chart title

        Returns:
            BytesIO buffer containing the PNG image
        """
        fig = None
        try:
            df = self._to_frame(report)

            fig, ax = plt.subplots(figsize=(CHART_WIDTH, CHART_HEIGHT))

            if df.empty:
                ax.text(
                    0.5,
                    0.5,
                    "No report data available",
                    ha="center",
                    va="center",
                    fontsize=14,
                )
                ax.set_xlim(0, 1)
                ax.set_ylim(0, 1)
                ax.set_axis_off()
            elif df["Group"].isna().all():
                sns.barplot(data=df, x="Period", y="Total", color="#3498db", ax=ax)
            else:
                sns.lineplot(
                    data=df,
                    x="Period",
                    y="Total",
                    hue="Group",
                    marker="o",
                    linewidth=2,
                    ax=ax,
                )
                ax.legend(loc="upper left", title="")

            ax.set_title(title, fontsize=14, fontweight="bold")
            if not df.empty:
                ax.set_xlabel("")
                ax.set_ylabel("Total", fontsize=11)
                ax.tick_params(axis="x", rotation=45)
                ax.yaxis.set_major_formatter(FuncFormatter(lambda x, p: f"{x:,.0f}"))

            plt.tight_layout()

            buf = io.BytesIO()
            fig.savefig(buf, format=CHART_FORMAT, dpi=CHART_DPI, bbox_inches="tight")
            buf.seek(0)

            logger.debug(f"Generated report chart '{title}' ({len(df)} points)")
            return buf
        except Exception as e:
            logger.error(f"Error generating report chart: {e}", exc_info=True)
            raise
        finally:
            # Always close the figure to free memory
            if fig is not None:
                plt.close(fig)

    @staticmethod
    def _to_frame(report: Report) -> pd.DataFrame:
        """Long-format frame (Period, Group, Total), oldest period first."""
        records = []
        for item in report:
            if isinstance(item, GroupSeries):
                for bucket in item.series:
                    records.append(
                        {
                            "Period": bucket.bucket_key,
                            "Group": item.label,
                            "Total": float(bucket.total),
                        }
                    )
            else:
                records.append(
                    {
                        "Period": item.bucket_key,
                        "Group": None,
                        "Total": float(item.total),
                    }
                )

        df = pd.DataFrame(records, columns=["Period", "Group", "Total"])
        return df.sort_values("Period", kind="stable").reset_index(drop=True)

    def format_report_message(
        self,
        report: Report,
        title: str,
        subtitle: Optional[str] = None,
        count_label: str = "entries",
    ) -> str:
        """
        Format a report as a Discord message.

        Args:
            report: Output of any report operation
            title: Heading line
            subtitle: Optional second line (e.g. the date range)
            count_label: What the bucket counts are (entries, visits, ...)

        Returns:
            Message text no longer than the Discord message limit
        """
        header = [f"📊 **{title}**"]
        if subtitle:
            header.append(f"_{subtitle}_")

        if not report:
            header.append("")
            header.append("No data for this report.")
            return "\n".join(header)

        sections: list[tuple[Optional[str], list[str]]] = []
        for item in report:
            if isinstance(item, GroupSeries):
                heading = (
                    f"**{item.label}** · total {format_amount(item.total)} "
                    f"· {item.count} {count_label}"
                )
                sections.append(
                    (heading, self._bucket_lines(item.series, count_label))
                )
            else:
                if not sections:
                    sections.append((None, []))
                sections[0][1].extend(self._bucket_lines([item], count_label))

        return self._fit_message(header, sections)

    @staticmethod
    def _bucket_lines(buckets: list[ReportBucket], count_label: str) -> list[str]:
        lines = []
        for bucket in buckets:
            prefix = f"{bucket.sequence_id:<4} " if bucket.sequence_id else ""
            lines.append(
                f"{prefix}{bucket.bucket_key:<10} {format_amount(bucket.total):>15} "
                f"({bucket.count} {count_label})"
            )
            for key, subtotal in bucket.subtotals.items():
                lines.append(f"{'':<{len(prefix)}}  {key:<20} {format_amount(subtotal):>12}")
        return lines

    @staticmethod
    def _fit_message(
        header: list[str], sections: list[tuple[Optional[str], list[str]]]
    ) -> str:
        """Join sections into code blocks, truncating at the message limit."""
        limit = DISCORD_MESSAGE_MAX_LENGTH - len(_TRUNCATION_NOTE) - 8
        message = "\n".join(header)

        for heading, lines in sections:
            opening = ("\n\n" + heading if heading else "\n") + "\n```"
            if len(message) + len(opening) + len(lines[0]) + 5 > limit:
                return f"{message}\n{_TRUNCATION_NOTE}"
            message += opening
            for line in lines:
                if len(message) + len(line) + 5 > limit:
                    return f"{message}\n```\n{_TRUNCATION_NOTE}"
                message += "\n" + line
            message += "\n```"

        return message
