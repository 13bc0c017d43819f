"""
Cashbox Cog for recording and managing ledger transactions.

Handles the /txn_create, /txn_view, /txn_edit, /txn_delete, /txn_list and
/services commands.
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from cashbox.bot.responses import (
    format_transaction,
    not_found_message,
    parse_amount_option,
    parse_id_list,
    send,
    send_error,
    truncate,
)
from cashbox.config import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT
from cashbox.db import CashboxRepository
from cashbox.errors import ValidationError
from cashbox.services.reports import format_amount

logger = logging.getLogger(__name__)

PAYMENT_METHOD_CHOICES = [
    app_commands.Choice(name="Cash", value="cash"),
    app_commands.Choice(name="Card", value="card"),
    app_commands.Choice(name="Bank transfer", value="transfer"),
    app_commands.Choice(name="E-wallet", value="ewallet"),
    app_commands.Choice(name="Insurance", value="insurance"),
]


class CashboxCog(commands.Cog):
    """Cog for cashbox ledger functionality."""

    def __init__(self, bot: commands.Bot, repository: CashboxRepository):
        self.bot = bot
        self.repository = repository

    @app_commands.command(name="txn_create", description="Record a cashbox payment")
    @app_commands.describe(
        amount="Amount paid (e.g. 150000, 150k, 52.500)",
        payment_method="How the patient paid",
        services="Service ids, comma separated (see /services)",
        patient="Patient reference",
        specialist="Specialist reference",
        comment="Optional comment",
    )
    @app_commands.choices(payment_method=PAYMENT_METHOD_CHOICES)
    async def txn_create_command(
        self,
        interaction: discord.Interaction,
        amount: str,
        payment_method: str,
        services: str,
        patient: Optional[str] = None,
        specialist: Optional[str] = None,
        comment: Optional[str] = None,
    ):
        """Create a transaction linked to one or more services."""
        try:
            parsed_amount = parse_amount_option(amount)
            if parsed_amount is None:
                raise ValidationError("Amount is required")

            transaction_id = self.repository.create_transaction(
                amount=parsed_amount,
                payment_method=payment_method,
                service_ids=parse_id_list(services),
                patient=patient,
                specialist=specialist,
                comment=comment,
            )
            transaction = self.repository.get_transaction(transaction_id)

            await send(
                interaction,
                f"✅ Recorded transaction:\n{format_transaction(transaction)}",
            )
            logger.info(
                f"User {interaction.user.id} created transaction {transaction_id}"
            )
        except Exception as e:
            await send_error(interaction, e, "txn_create")

    @app_commands.command(name="txn_view", description="Show a cashbox transaction")
    @app_commands.describe(transaction_id="The ID of the transaction")
    async def txn_view_command(
        self, interaction: discord.Interaction, transaction_id: int
    ):
        """Show a transaction with its services."""
        try:
            transaction = self.repository.get_transaction(transaction_id)
            if transaction is None:
                await send(
                    interaction,
                    not_found_message(f"Transaction `#{transaction_id}` does not exist."),
                )
                return

            await send(interaction, format_transaction(transaction))
        except Exception as e:
            await send_error(interaction, e, "txn_view")

    @app_commands.command(
        name="txn_edit", description="Edit a cashbox transaction"
    )
    @app_commands.describe(
        transaction_id="The ID of the transaction to edit",
        services="New service ids, comma separated (replaces the current ones)",
        amount="New amount (leave empty to keep current)",
        payment_method="New payment method (leave empty to keep current)",
        comment="New comment (leave empty to keep current)",
    )
    @app_commands.choices(payment_method=PAYMENT_METHOD_CHOICES)
    async def txn_edit_command(
        self,
        interaction: discord.Interaction,
        transaction_id: int,
        services: str,
        amount: Optional[str] = None,
        payment_method: Optional[str] = None,
        comment: Optional[str] = None,
    ):
        """Update a transaction and replace its services."""
        try:
            updated = self.repository.update_transaction(
                transaction_id,
                service_ids=parse_id_list(services),
                amount=parse_amount_option(amount),
                payment_method=payment_method,
                comment=comment,
            )
            if updated is None:
                await send(
                    interaction,
                    not_found_message(f"Transaction `#{transaction_id}` does not exist."),
                )
                return

            await send(
                interaction, f"✏️ Updated transaction:\n{format_transaction(updated)}"
            )
            logger.info(
                f"User {interaction.user.id} updated transaction {transaction_id}"
            )
        except Exception as e:
            await send_error(interaction, e, "txn_edit")

    @app_commands.command(
        name="txn_delete", description="Delete a cashbox transaction"
    )
    @app_commands.describe(transaction_id="The ID of the transaction to delete")
    async def txn_delete_command(
        self, interaction: discord.Interaction, transaction_id: int
    ):
        """Delete a transaction and its service links."""
        try:
            # Fetch first to show what is being deleted
            transaction = self.repository.get_transaction(transaction_id)
            if transaction is None or not self.repository.delete_transaction(
                transaction_id
            ):
                await send(
                    interaction,
                    not_found_message(f"Transaction `#{transaction_id}` does not exist."),
                )
                return

            await send(
                interaction,
                f"🗑️ Deleted transaction:\n{format_transaction(transaction)}",
            )
            logger.info(
                f"User {interaction.user.id} deleted transaction {transaction_id}"
            )
        except Exception as e:
            await send_error(interaction, e, "txn_delete")

    @app_commands.command(name="txn_list", description="Show the latest transactions")
    @app_commands.describe(
        limit=f"Number of transactions to show (default: {DEFAULT_LIST_LIMIT}, "
        f"max: {MAX_LIST_LIMIT})"
    )
    async def txn_list_command(
        self, interaction: discord.Interaction, limit: int = DEFAULT_LIST_LIMIT
    ):
        """List the most recent transactions."""
        try:
            limit = min(max(1, limit), MAX_LIST_LIMIT)
            transactions = self.repository.list_transactions(limit=limit)

            if not transactions:
                await send(interaction, "📭 No transactions recorded yet.")
                return

            total = self.repository.count_transactions()
            lines = [
                f"📜 **Cashbox Transactions** (showing {len(transactions)} of {total}):\n"
            ]
            lines.extend(format_transaction(t) for t in transactions)

            await send(interaction, truncate("\n".join(lines)))
        except Exception as e:
            await send_error(interaction, e, "txn_list")

    @app_commands.command(name="services", description="Show the service catalog")
    async def services_command(self, interaction: discord.Interaction):
        """List catalog services with their ids."""
        try:
            services = self.repository.services.list_services()
            if not services:
                await send(interaction, "📭 The service catalog is empty.")
                return

            lines = ["🩺 **Services**\n"]
            for service in services:
                status = "" if service.is_available else " _(unavailable)_"
                lines.append(
                    f"`#{service.id}` {service.title} · {format_amount(service.price)}"
                    f"{status}"
                )

            await send(interaction, truncate("\n".join(lines)))
        except Exception as e:
            await send_error(interaction, e, "services")
