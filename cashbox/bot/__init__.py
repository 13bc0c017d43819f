from .client import CashboxBot, create_bot
from .cogs import CashboxCog, ExportCog, GeneralCog, ReportsCog
from .responses import error_message, format_transaction
from .runner import run

__all__ = [
    # Bot
    "CashboxBot",
    "create_bot",
    "run",
    # Cogs
    "CashboxCog",
    "ExportCog",
    "GeneralCog",
    "ReportsCog",
    # Utilities
    "error_message",
    "format_transaction",
]
