"""
Shared helpers for slash command responses.

Maps error kinds to user-facing messages, parses command option text and
formats ledger records for chat.
"""

import logging
import re
from decimal import Decimal
from typing import Optional, Union

import discord

from cashbox.config import DISCORD_MESSAGE_MAX_LENGTH, ERROR_MESSAGES
from cashbox.db.models import Transaction
from cashbox.errors import CashboxError, ErrorKind, ValidationError
from cashbox.services import AmountParser
from cashbox.services.reports import format_amount

logger = logging.getLogger(__name__)

# Kinds whose message tells the user what to fix
_DETAILED_KINDS = {
    ErrorKind.VALIDATION,
    ErrorKind.INVALID_PERIOD,
    ErrorKind.MISSING_DATE_RANGE,
}


def is_dm(interaction: discord.Interaction) -> bool:
    """Check if interaction is in a DM."""
    return interaction.guild is None


def error_message(error: Union[CashboxError, ErrorKind]) -> str:
    """
    User-facing text for a failure, chosen by its kind.

    Store failures never leak database details to chat.
    """
    kind = error if isinstance(error, ErrorKind) else error.kind
    text = f"❌ {ERROR_MESSAGES.get(kind.value, ERROR_MESSAGES['internal_error'])}"
    if isinstance(error, CashboxError) and kind in _DETAILED_KINDS:
        text += f"\n{error.message}"
    return text


def not_found_message(what: str) -> str:
    return f"{error_message(ErrorKind.NOT_FOUND)}\n{what}"


def parse_amount_option(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse an amount option typed in shorthand (150k, 52.500, 1.5jt).

    Raises:
        ValidationError: If the text is not a single amount
    """
    if text is None or not text.strip():
        return None
    amount = AmountParser.parse(text)
    if amount is None:
        raise ValidationError(f"Could not read amount {text!r}. Try e.g. 150k or 52.500")
    return amount


def parse_id_list(text: Optional[str], name: str = "service id") -> list[int]:
    """
    Parse a comma or space separated list of ids ("3, 5 8").

    Raises:
        ValidationError: If the list is empty or holds a non-number
    """
    parts = [part for part in re.split(r"[,\s]+", text or "") if part]
    if not parts:
        raise ValidationError(f"Provide at least one {name}")

    ids = []
    for part in parts:
        if not part.lstrip("#").isdigit():
            raise ValidationError(f"Invalid {name}: {part!r}")
        ids.append(int(part.lstrip("#")))
    return ids


def format_transaction(transaction: Transaction) -> str:
    """Format a cashbox transaction for display."""
    services = ", ".join(f"{s.title} (#{s.id})" for s in transaction.services) or "-"
    date_str = transaction.created_at.strftime("%Y-%m-%d %H:%M")

    line = (
        f"`#{transaction.id}` 💵 **{format_amount(transaction.amount)}** "
        f"via {transaction.payment_method} | {services} | {date_str}"
    )
    details = [
        f"patient: {transaction.patient}" if transaction.patient else None,
        f"specialist: {transaction.specialist}" if transaction.specialist else None,
        transaction.comment,
    ]
    details = [d for d in details if d]
    if details:
        line += f"\n  └ {' · '.join(details)}"
    return line


def truncate(message: str, limit: int = DISCORD_MESSAGE_MAX_LENGTH) -> str:
    if len(message) <= limit:
        return message
    return message[: limit - 3] + "..."


async def send(interaction: discord.Interaction, content: str, **kwargs):
    """Reply through the initial response, or a followup once it is used."""
    ephemeral = kwargs.pop("ephemeral", not is_dm(interaction))
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=ephemeral, **kwargs)
    else:
        await interaction.response.send_message(
            content, ephemeral=ephemeral, **kwargs
        )


async def send_error(interaction: discord.Interaction, error: Exception, command: str):
    """Log a command failure and tell the user what went wrong."""
    if isinstance(error, CashboxError) and error.kind in _DETAILED_KINDS:
        logger.warning(f"Rejected input in {command}: {error.message}")
        message = error_message(error)
    elif isinstance(error, CashboxError):
        logger.error(f"{error.kind.value} error in {command}: {error}", exc_info=error)
        message = error_message(error)
    else:
        logger.error(f"Error in {command}: {error}", exc_info=error)
        message = f"❌ {ERROR_MESSAGES['internal_error']}"

    try:
        await send(interaction, message)
    except discord.HTTPException:
        logger.error("Could not send error message to user", exc_info=True)
