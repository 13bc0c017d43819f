"""Tests for AmountParser shorthand."""

from decimal import Decimal

import pytest

from cashbox.services import AmountParser


class TestAmountParser:
    """Test AmountParser.parse."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("150000", Decimal("150000")),
            ("150k", Decimal("150000")),
            ("1.5k", Decimal("1500")),
            ("2.5m", Decimal("2500000")),
            ("3jt", Decimal("3000000")),
            ("52.500", Decimal("52500")),
            ("1.250.000", Decimal("1250000")),
            ("1,250,000", Decimal("1250000")),
            ("1,250.50", Decimal("1250.50")),
            ("99.95", Decimal("99.95")),
            ("Rp 75.000", Decimal("75000")),
            ("  20 rb ", Decimal("20000")),
        ],
    )
    def test_valid_amounts(self, text, expected):
        assert AmountParser.parse(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "12 apples", "k", None])
    def test_invalid_amounts(self, text):
        assert AmountParser.parse(text) is None
