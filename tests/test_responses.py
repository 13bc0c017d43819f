"""Tests for the slash command response helpers."""

import asyncio
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from cashbox.bot.responses import (
    error_message,
    format_transaction,
    parse_amount_option,
    parse_id_list,
    send_error,
)
from cashbox.config import ERROR_MESSAGES
from cashbox.db.models import Service, Transaction
from cashbox.errors import (
    ErrorKind,
    InvalidPeriodError,
    MissingDateRangeError,
    StoreError,
    ValidationError,
)


def _interaction(done: bool = False):
    interaction = MagicMock()
    interaction.guild = None
    interaction.response.is_done.return_value = done
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


class TestErrorMessage:
    """Error kinds map to configured user messages."""

    @pytest.mark.parametrize(
        "error,key",
        [
            (ValidationError("bad amount"), "validation"),
            (InvalidPeriodError("hourly"), "invalid_period"),
            (MissingDateRangeError("need both"), "missing_date_range"),
            (StoreError("disk I/O error"), "store"),
        ],
    )
    def test_kind_selects_message(self, error, key):
        assert ERROR_MESSAGES[key] in error_message(error)

    def test_input_errors_show_details(self):
        assert "bad amount" in error_message(ValidationError("bad amount"))

    def test_store_errors_hide_details(self):
        assert "disk I/O error" not in error_message(StoreError("disk I/O error"))

    def test_not_found_kind(self):
        assert ERROR_MESSAGES["not_found"] in error_message(ErrorKind.NOT_FOUND)


class TestOptionParsing:
    """Test parsing of command option text."""

    def test_id_list(self):
        assert parse_id_list("3, 5 #8") == [3, 5, 8]

    @pytest.mark.parametrize("text", ["", None, " , ", "3, x"])
    def test_bad_id_list(self, text):
        with pytest.raises(ValidationError):
            parse_id_list(text)

    def test_amount_option(self):
        assert parse_amount_option("150k") == Decimal("150000")
        assert parse_amount_option("  ") is None

    def test_bad_amount_option(self):
        with pytest.raises(ValidationError):
            parse_amount_option("lots")


class TestFormatTransaction:
    """Test format_transaction."""

    def test_includes_services_and_details(self):
        transaction = Transaction(
            id=7,
            amount=Decimal("450000"),
            payment_method="cash",
            created_at=datetime(2024, 3, 1, 9, 15),
            patient="P-001",
            services=[Service(id=1, title="Consultation", price=Decimal("150000"))],
        )

        text = format_transaction(transaction)

        assert "`#7`" in text
        assert "450,000" in text
        assert "Consultation (#1)" in text
        assert "2024-03-01 09:15" in text
        assert "patient: P-001" in text


class TestSendError:
    """Test send_error."""

    def test_store_error_uses_initial_response(self):
        interaction = _interaction()

        asyncio.run(send_error(interaction, StoreError("locked"), "txn_create"))

        interaction.response.send_message.assert_awaited_once()
        content = interaction.response.send_message.await_args.args[0]
        assert ERROR_MESSAGES["store"] in content

    def test_unexpected_error_uses_followup_when_deferred(self):
        interaction = _interaction(done=True)

        asyncio.run(send_error(interaction, RuntimeError("boom"), "cashbox_report"))

        interaction.followup.send.assert_awaited_once()
        content = interaction.followup.send.await_args.args[0]
        assert ERROR_MESSAGES["internal_error"] in content
