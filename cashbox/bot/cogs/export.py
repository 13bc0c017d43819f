"""
Export Cog for report export functionality.

Handles the /export_report command for exporting reports to XLSX and CSV formats.
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from cashbox.bot.responses import send, send_error
from cashbox.errors import ValidationError
from cashbox.services.date_range import parse_bound, resolve_range
from cashbox.services.export import ExportFormat, ExportService
from cashbox.services.reports import ReportService

from .reports import PERIOD_CHOICES

logger = logging.getLogger(__name__)


class ExportCog(commands.Cog):
    """Cog for report export functionality."""

    def __init__(
        self,
        bot: commands.Bot,
        report_service: ReportService,
        export_service: ExportService,
    ):
        self.bot = bot
        self.report_service = report_service
        self.export_service = export_service

    @app_commands.command(
        name="export_report", description="Export a report to a file"
    )
    @app_commands.describe(
        report="Which report to export",
        period="Report granularity",
        format="Export format (xlsx or csv)",
        start="Start date (YYYY-MM-DD)",
        end="End date (YYYY-MM-DD)",
    )
    @app_commands.choices(
        report=[
            app_commands.Choice(name="Expenses", value="expenses"),
            app_commands.Choice(name="Appointments", value="appointments"),
            app_commands.Choice(name="Cashbox revenue", value="cashbox"),
        ],
        period=PERIOD_CHOICES,
        format=[
            app_commands.Choice(name="Excel (XLSX)", value="xlsx"),
            app_commands.Choice(name="CSV", value="csv"),
        ],
    )
    async def export_command(
        self,
        interaction: discord.Interaction,
        report: str,
        period: str = "monthly",
        format: str = "xlsx",
        start: Optional[str] = None,
        end: Optional[str] = None,
    ):
        """Export a report to XLSX or CSV file."""
        try:
            await interaction.response.defer()

            export_format = ExportFormat(format)

            if report == "expenses":
                window = resolve_range(start, end, required=False)
                buffer = self.export_service.export_buckets(
                    self.report_service.expense_report(period, start, end),
                    export_format,
                )
            elif report == "appointments":
                # Appointment reports always cover every visit
                if parse_bound(start) or parse_bound(end):
                    raise ValidationError(
                        "Appointment reports cover all visits; leave start and end empty."
                    )
                window = None
                buffer = self.export_service.export_series(
                    self.report_service.appointment_report(period), export_format
                )
            else:
                window = self.report_service.cashbox_window(start, end)
                buffer = self.export_service.export_series(
                    self.report_service.cashbox_report(period, window.start, window.end),
                    export_format,
                )

            filename = self.export_service.get_filename(
                report,
                export_format,
                window.start if window else None,
                window.end if window else None,
            )

            try:
                file = discord.File(buffer, filename=filename)
                await interaction.followup.send(
                    f"📁 Here's the {report} report ({period}):", file=file
                )
                logger.info(f"Exported {report} report as {filename}")
            except discord.HTTPException as e:
                logger.error(f"Discord API error sending file: {e}", exc_info=True)
                await send(
                    interaction, "❌ Error uploading file. The export may be too large."
                )
            finally:
                buffer.close()
        except Exception as e:
            await send_error(interaction, e, "export_report")
