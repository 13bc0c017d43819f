"""Tests for ExportService and the export command."""

import asyncio
import csv
import io
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from openpyxl import load_workbook

from cashbox.bot.cogs.export import ExportCog
from cashbox.config import ERROR_MESSAGES
from cashbox.models import GroupSeries, ReportBucket
from cashbox.services.date_range import trailing_window
from cashbox.services.export import ExportFormat, ExportService
from cashbox.services.reports import ReportService


@pytest.fixture
def export_service():
    return ExportService()


@pytest.fixture
def buckets():
    return [
        ReportBucket("2024-02", {"Supplies": Decimal("50.25")}, count=1, sequence_id="R1"),
        ReportBucket(
            "2024-01",
            {"Rent": Decimal("2000"), "Supplies": Decimal("100")},
            count=2,
            sequence_id="R2",
        ),
    ]


class TestExportService:
    """Test CSV and XLSX exports."""

    def test_csv_buckets(self, export_service, buckets):
        buffer = export_service.export_buckets(buckets, ExportFormat.CSV)
        raw = buffer.getvalue()

        assert raw.startswith(b"\xef\xbb\xbf")
        rows = list(csv.reader(io.StringIO(raw.decode("utf-8-sig"))))
        assert rows[0] == ["ID", "Period", "Rent", "Supplies", "Total", "Count"]
        assert rows[1] == ["R1", "2024-02", "0", "50.25", "50.25", "1"]
        assert rows[2] == ["R2", "2024-01", "2000", "100", "2100", "2"]

    def test_xlsx_series(self, export_service, buckets):
        series = [GroupSeries(3, "Cleaning", buckets)]

        buffer = export_service.export_series(series, "xlsx")
        workbook = load_workbook(buffer)

        sheet = workbook["Report"]
        assert [c.value for c in sheet[1]] == [
            "Group ID", "Group", "Period", "Rent", "Supplies", "Total", "Count",
        ]
        assert sheet.cell(row=2, column=2).value == "Cleaning"
        assert sheet.cell(row=3, column=6).value == 2100
        assert sheet.freeze_panes == "A2"
        assert workbook["Summary"].cell(row=5, column=3).value == 2150.25

    def test_empty_report_has_header_only(self, export_service):
        buffer = export_service.export_buckets([], ExportFormat.CSV)
        rows = list(csv.reader(io.StringIO(buffer.getvalue().decode("utf-8-sig"))))
        assert rows == [["ID", "Period", "Total", "Count"]]

    def test_filename(self, export_service):
        name = export_service.get_filename(
            "cashbox", ExportFormat.CSV, date(2024, 1, 1), date(2024, 1, 31)
        )
        assert name.startswith("cashbox_cashbox_")
        assert name.endswith("_20240101-20240131.csv")


def _interaction():
    interaction = MagicMock()
    interaction.guild = None
    interaction.response.defer = AsyncMock()
    interaction.response.is_done.return_value = True
    interaction.followup.send = AsyncMock()
    return interaction


class TestExportCommand:
    """Date ranges are resolved per report kind."""

    @pytest.fixture
    def queries(self):
        queries = MagicMock()
        queries.get_cashbox_rows.return_value = []
        queries.get_appointments.return_value = []
        return queries

    @pytest.fixture
    def cog(self, queries, export_service):
        return ExportCog(MagicMock(), ReportService(queries), export_service)

    def test_one_bound_cashbox_export_uses_trailing_window(self, cog, queries):
        interaction = _interaction()

        asyncio.run(
            cog.export_command.callback(
                cog, interaction, "cashbox", "daily", "csv", "2024-01-01", None
            )
        )

        window = trailing_window()
        queries.get_cashbox_rows.assert_called_once_with(window.start, window.end)
        sent = interaction.followup.send.await_args
        assert sent.kwargs["file"].filename.endswith(
            f"_{window.start:%Y%m%d}-{window.end:%Y%m%d}.csv"
        )

    def test_appointment_export_rejects_range(self, cog, queries):
        interaction = _interaction()

        asyncio.run(
            cog.export_command.callback(
                cog, interaction, "appointments", "weekly", "csv", "2024-01-01", None
            )
        )

        queries.get_appointments.assert_not_called()
        content = interaction.followup.send.await_args.args[0]
        assert ERROR_MESSAGES["validation"] in content
