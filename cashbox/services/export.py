"""
Export service for report data.

Provides functionality to export report results to XLSX and CSV formats.
"""

import csv
import io
from datetime import date, datetime
from enum import Enum
from typing import Optional, cast

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from cashbox.models import GroupSeries, ReportBucket

AMOUNT_FORMAT = "#,##0.00"


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    XLSX = "xlsx"


def _subtotal_keys(buckets: list[ReportBucket]) -> list[str]:
    keys: set[str] = set()
    for bucket in buckets:
        keys.update(bucket.subtotals)
    return sorted(keys)


class ExportService:
    """Service for exporting report results to files."""

    def export_buckets(
        self, buckets: list[ReportBucket], format: ExportFormat
    ) -> io.BytesIO:
        """
        Export a flat report (one row per bucket).

        Args:
            buckets: Output of an expense report
            format: Export format

        Returns:
            BytesIO buffer containing the file
        """
        keys = _subtotal_keys(buckets)
        headers = ["ID", "Period", *keys, "Total", "Count"]
        rows = [
            [
                bucket.sequence_id or "",
                bucket.bucket_key,
                *[bucket.subtotals.get(key, 0) for key in keys],
                bucket.total,
                bucket.count,
            ]
            for bucket in buckets
        ]
        amount_columns = range(3, 3 + len(keys) + 1)
        return self._write(format, "Report", headers, rows, amount_columns)

    def export_series(
        self, series: list[GroupSeries], format: ExportFormat
    ) -> io.BytesIO:
        """
        Export a grouped report (one row per group and bucket).

        Args:
            series: Output of an appointment or cashbox report
            format: Export format

        Returns:
            BytesIO buffer containing the file
        """
        keys = _subtotal_keys([b for group in series for b in group.series])
        headers = ["Group ID", "Group", "Period", *keys, "Total", "Count"]
        rows = [
            [
                group.group_key,
                group.label,
                bucket.bucket_key,
                *[bucket.subtotals.get(key, 0) for key in keys],
                bucket.total,
                bucket.count,
            ]
            for group in series
            for bucket in group.series
        ]
        amount_columns = range(4, 4 + len(keys) + 1)
        buffer = self._write(
            format,
            "Report",
            headers,
            rows,
            amount_columns,
            summary=[[g.group_key, g.label, g.total, g.count] for g in series],
        )
        return buffer

    def _write(
        self,
        format: ExportFormat,
        title: str,
        headers: list[str],
        rows: list[list],
        amount_columns: range,
        summary: Optional[list[list]] = None,
    ) -> io.BytesIO:
        format = ExportFormat(format)
        if format == ExportFormat.CSV:
            return self._write_csv(headers, rows)
        return self._write_xlsx(title, headers, rows, amount_columns, summary)

    def _write_csv(self, headers: list[str], rows: list[list]) -> io.BytesIO:
        text_buffer = io.StringIO()
        writer = csv.writer(text_buffer)
        writer.writerow(headers)
        writer.writerows(rows)

        buffer = io.BytesIO()
        buffer.write(text_buffer.getvalue().encode("utf-8-sig"))  # BOM for Excel
        buffer.seek(0)
        return buffer

    def _write_xlsx(
        self,
        title: str,
        headers: list[str],
        rows: list[list],
        amount_columns: range,
        summary: Optional[list[list]],
    ) -> io.BytesIO:
        wb = Workbook()
        ws = cast(Worksheet, wb.active)
        ws.title = title

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )

        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        for row_idx, values in enumerate(rows, 2):
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row_idx, column=col, value=value)
                if col in amount_columns:
                    cell.number_format = AMOUNT_FORMAT

        for col, header in enumerate(headers, 1):
            ws.column_dimensions[get_column_letter(col)].width = max(12, len(header) + 4)

        ws.freeze_panes = "A2"

        if summary is not None:
            self._add_summary_sheet(wb, summary)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    def _add_summary_sheet(self, wb: Workbook, summary: list[list]):
        """Add a per-group totals sheet to the workbook."""
        ws = wb.create_sheet(title="Summary")

        ws.cell(row=1, column=1, value="Report Summary").font = Font(bold=True, size=14)
        ws.cell(
            row=2,
            column=1,
            value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        )

        for col, header in enumerate(["Group ID", "Group", "Total", "Count"], 1):
            ws.cell(row=4, column=col, value=header).font = Font(bold=True)

        for row_idx, values in enumerate(summary, 5):
            for col, value in enumerate(values, 1):
                ws.cell(row=row_idx, column=col, value=value)
            ws.cell(row=row_idx, column=3).number_format = AMOUNT_FORMAT

        ws.column_dimensions["A"].width = 10
        ws.column_dimensions["B"].width = 30
        ws.column_dimensions["C"].width = 18
        ws.column_dimensions["D"].width = 10

    def get_filename(
        self,
        kind: str,
        format: ExportFormat,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> str:
        """
        Generate a filename for the export.

        Args:
            kind: Report kind (expenses, appointments, cashbox)
            format: Export format
            start_date: Optional start date
            end_date: Optional end date

        Returns:
            Suggested filename
        """
        date_str = datetime.now().strftime("%Y%m%d")

        if start_date and end_date:
            date_range = (
                f"_{start_date.strftime('%Y%m%d')}-{end_date.strftime('%Y%m%d')}"
            )
        else:
            date_range = ""

        return f"cashbox_{kind}_{date_str}{date_range}.{ExportFormat(format).value}"
