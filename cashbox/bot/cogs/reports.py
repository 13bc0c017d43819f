"""
Reports Cog for periodic reports with charts.

Handles the /expense_report, /expense_range, /appointment_report and
/cashbox_report commands.
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from cashbox.bot.responses import send, send_error
from cashbox.models import Period
from cashbox.services.reports import ReportService

logger = logging.getLogger(__name__)

PERIOD_CHOICES = [
    app_commands.Choice(name=period.label, value=period.value) for period in Period
]


def _range_subtitle(start: Optional[str], end: Optional[str]) -> Optional[str]:
    if start and end:
        return f"{start} to {end}"
    return None


class ReportsCog(commands.Cog):
    """Cog for expense, appointment and cashbox reports."""

    def __init__(self, bot: commands.Bot, report_service: ReportService):
        self.bot = bot
        self.report_service = report_service

    async def _send_report(
        self,
        interaction: discord.Interaction,
        report,
        title: str,
        subtitle: Optional[str] = None,
        count_label: str = "entries",
    ):
        """Send the formatted report with its chart attached."""
        message = self.report_service.format_report_message(
            report, title, subtitle=subtitle, count_label=count_label
        )
        if not report:
            await send(interaction, message)
            return

        chart_buffer = self.report_service.generate_report_chart(report, title)
        try:
            file = discord.File(chart_buffer, filename="report_chart.png")
            await interaction.followup.send(content=message, file=file)
        except discord.HTTPException as e:
            logger.error(f"Discord API error sending report: {e}", exc_info=True)
            await send(interaction, message)
        finally:
            chart_buffer.close()

    @app_commands.command(
        name="expense_report", description="Expenses per period by category"
    )
    @app_commands.describe(
        period="Report granularity",
        start="Start date (YYYY-MM-DD), together with end",
        end="End date (YYYY-MM-DD), together with start",
    )
    @app_commands.choices(period=PERIOD_CHOICES)
    async def expense_report_command(
        self,
        interaction: discord.Interaction,
        period: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ):
        """Expense report by period."""
        try:
            await interaction.response.defer()
            report = self.report_service.expense_report(period, start, end)
            await self._send_report(
                interaction,
                report,
                f"{Period.parse(period).label} Expenses",
                subtitle=_range_subtitle(start, end) or "All time",
            )
            logger.info(f"Sent {period} expense report ({len(report)} buckets)")
        except Exception as e:
            await send_error(interaction, e, "expense_report")

    @app_commands.command(
        name="expense_range", description="Daily expenses for a date range"
    )
    @app_commands.describe(
        start="Start date (YYYY-MM-DD)",
        end="End date (YYYY-MM-DD)",
    )
    async def expense_range_command(
        self, interaction: discord.Interaction, start: str, end: str
    ):
        """Expense report by date range."""
        try:
            await interaction.response.defer()
            report = self.report_service.expense_report_by_date_range(start, end)
            await self._send_report(
                interaction,
                report,
                "Daily Expenses",
                subtitle=_range_subtitle(start, end),
            )
            logger.info(f"Sent expense range report {start}..{end}")
        except Exception as e:
            await send_error(interaction, e, "expense_range")

    @app_commands.command(
        name="appointment_report", description="Visits per service by status"
    )
    @app_commands.describe(period="Report granularity")
    @app_commands.choices(period=PERIOD_CHOICES)
    async def appointment_report_command(
        self, interaction: discord.Interaction, period: str
    ):
        """Appointment report by period."""
        try:
            await interaction.response.defer()
            report = self.report_service.appointment_report(period)
            await self._send_report(
                interaction,
                report,
                f"{Period.parse(period).label} Appointments",
                count_label="visits",
            )
            logger.info(f"Sent {period} appointment report ({len(report)} services)")
        except Exception as e:
            await send_error(interaction, e, "appointment_report")

    @app_commands.command(
        name="cashbox_report", description="Revenue per service and period"
    )
    @app_commands.describe(
        period="Report granularity",
        start="Start date (YYYY-MM-DD); last 30 days when omitted",
        end="End date (YYYY-MM-DD); last 30 days when omitted",
    )
    @app_commands.choices(period=PERIOD_CHOICES)
    async def cashbox_report_command(
        self,
        interaction: discord.Interaction,
        period: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ):
        """Cashbox revenue report by period."""
        try:
            await interaction.response.defer()
            report = self.report_service.cashbox_report(period, start, end)
            await self._send_report(
                interaction,
                report,
                f"{Period.parse(period).label} Cashbox Revenue",
                subtitle=_range_subtitle(start, end) or "Last 30 days",
                count_label="transactions",
            )
            logger.info(f"Sent {period} cashbox report ({len(report)} services)")
        except Exception as e:
            await send_error(interaction, e, "cashbox_report")
