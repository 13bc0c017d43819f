"""
General Cog for help and utility commands.

Handles the /help and /ping commands.
"""

import discord
from discord import app_commands
from discord.ext import commands

from cashbox.bot.responses import is_dm

HELP_TEXT = """
**Cashbox** 🧾

I keep the clinic cashbox ledger and build expense, appointment and revenue reports.

**💵 Cashbox Transactions**
• `/txn_create <amount> <payment_method> <services>` - Record a payment for one or more services
• `/txn_view <id>` - Show a transaction and its services
• `/txn_edit <id> <services> [amount] [payment_method] [comment]` - Edit a transaction (replaces its services)
• `/txn_delete <id>` - Delete a transaction
• `/txn_list [limit]` - Show the latest transactions
• `/services` - Show the service catalog and ids

**📊 Reports**
• `/expense_report <period> [start] [end]` - Expenses per period by category
• `/expense_range <start> <end>` - Daily expenses for a date range
• `/appointment_report <period>` - Visits per service by status
• `/cashbox_report <period> [start] [end]` - Revenue per service (last 30 days by default)
• `/export_report <report> <format>` - Download a report as XLSX or CSV

**🔧 Utility**
• `/ping` - Check if the bot is responsive
• `/help` - Show this help message

**Formats:**
• Periods: `daily`, `weekly`, `monthly`, `yearly`
• Dates: `2024-01-31` (whole day) or `2024-01-31 14:00:00`
• Amounts: `150000`, `150k`, `1.5jt`, `52.500`
• Services: ids separated by commas, e.g. `3, 5`
"""


class GeneralCog(commands.Cog):
    """Cog for general bot commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="help", description="Show help for using Cashbox bot")
    async def help_command(self, interaction: discord.Interaction):
        """Show help information."""
        await interaction.response.send_message(
            HELP_TEXT.strip(), ephemeral=not is_dm(interaction)
        )

    @app_commands.command(name="ping", description="Check if the bot is responsive")
    async def ping_command(self, interaction: discord.Interaction):
        """Check bot latency."""
        latency = round(self.bot.latency * 1000)
        await interaction.response.send_message(
            f"🏓 Pong! Latency: {latency}ms",
            ephemeral=not is_dm(interaction),
        )
