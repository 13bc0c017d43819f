"""
Discord Bot Client for the Cashbox ledger.

This module provides the Discord bot interface using a cogs-based architecture
for better separation of concerns.
"""

import logging
from typing import Optional

import discord
from discord.ext import commands

from cashbox.db import CashboxRepository
from cashbox.services.export import ExportService
from cashbox.services.reports import ReportService

from .cogs import CashboxCog, ExportCog, GeneralCog, ReportsCog

logger = logging.getLogger(__name__)


class CashboxBot(commands.Bot):
    """Discord bot client for the clinic cashbox using cogs architecture."""

    def __init__(self, repository: Optional[CashboxRepository] = None):
        # Slash commands only, no message content needed
        intents = discord.Intents.default()

        super().__init__(command_prefix="!", intents=intents)

        try:
            self.repository = repository or CashboxRepository()
            logger.info(f"Repository initialized: {self.repository.db_path}")

            self.report_service = ReportService(self.repository.queries)
            logger.info("Report service initialized")

            self.export_service = ExportService()
            logger.info("Export service initialized")
        except Exception as e:
            logger.error(f"Failed to initialize bot services: {e}", exc_info=True)
            raise

    async def setup_hook(self):
        """Called when the bot is ready to set up cogs and commands."""
        try:
            logger.info("Starting bot setup...")

            # Add cogs with their dependencies
            await self.add_cog(GeneralCog(self))
            logger.info("Added GeneralCog")

            await self.add_cog(CashboxCog(self, self.repository))
            logger.info("Added CashboxCog")

            await self.add_cog(ReportsCog(self, self.report_service))
            logger.info("Added ReportsCog")

            await self.add_cog(
                ExportCog(
                    self,
                    self.report_service,
                    self.export_service,
                )
            )
            logger.info("Added ExportCog")

            # Sync commands with Discord
            await self.tree.sync()
            logger.info("Synced command tree with Discord")
        except Exception as e:
            logger.error(f"Error in setup_hook: {e}", exc_info=True)
            raise

    async def on_ready(self):
        """Called when the bot has successfully connected."""
        if self.user:
            logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
            logger.info(f"Loaded cogs: {', '.join(self.cogs.keys())}")
        else:
            logger.warning("Bot user is None in on_ready")

    async def on_error(self, event_method: str, *args, **kwargs):
        """Called when an event handler raises an exception."""
        logger.error(f"Error in event handler '{event_method}'", exc_info=True)


def create_bot(repository: Optional[CashboxRepository] = None) -> CashboxBot:
    """
    Create and configure the Discord bot.

    Args:
        repository: Optional CashboxRepository instance. If not provided,
                   one is opened at the configured database path.

    Returns:
        Configured CashboxBot instance ready to run.
    """
    return CashboxBot(repository=repository)
