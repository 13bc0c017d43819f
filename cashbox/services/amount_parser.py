import re
from decimal import Decimal, InvalidOperation
from typing import Optional


class AmountParser:
    """
    Parser for the amount shorthand cashiers type into chat commands.

    Supports:
    - Suffixes: k/rb/ribu (thousand), m/jt/juta/mil (million), b/miliar (billion)
    - Dot thousand separators: 52.500 = 52500, 1.250.000 = 1250000
    - Comma thousand separators: 1,250,000 and mixed 1,250.50
    - Plain numbers and decimals: 150000, 99.95, 1.5k = 1500

    Amounts are returned as exact Decimals so they can be stored without
    float rounding.
    """

    MULTIPLIERS = {
        "k": 1_000,
        "rb": 1_000,
        "ribu": 1_000,
        "m": 1_000_000,
        "jt": 1_000_000,
        "juta": 1_000_000,
        "mil": 1_000_000,
        "b": 1_000_000_000,
        "miliar": 1_000_000_000,
    }

    # The whole input must be one amount, optionally with a currency prefix
    AMOUNT_PATTERN = re.compile(
        r"""
        ^(?:rp\.?|idr)?\s*
        (?P<number>\d[\d.,]*)
        \s*
        (?P<suffix>k|rb|ribu|m|jt|juta|mil|b|miliar)?$
        """,
        re.VERBOSE | re.IGNORECASE,
    )

    @classmethod
    def parse(cls, text: str) -> Optional[Decimal]:
        """
        Parse an amount string.

        Args:
            text: Amount text (e.g. "150k", "52.500", "1.5jt", "Rp 75.000")

        Returns:
            Decimal value, or None if the text is not a single amount
        """
        if not text:
            return None

        match = cls.AMOUNT_PATTERN.match(text.strip())
        if not match:
            return None

        number = cls._normalize(match.group("number"))
        if number is None:
            return None

        suffix = match.group("suffix")
        if suffix:
            number *= cls.MULTIPLIERS[suffix.lower()]
        return number

    @classmethod
    def _normalize(cls, number_str: str) -> Optional[Decimal]:
        dots = number_str.count(".")
        commas = number_str.count(",")

        if dots and commas:
            # Whichever separator comes last is the decimal point
            if number_str.rfind(".") > number_str.rfind(","):
                normalized = number_str.replace(",", "")
            else:
                normalized = number_str.replace(".", "").replace(",", ".")
        elif dots > 1:
            normalized = number_str.replace(".", "")
        elif commas > 1:
            normalized = number_str.replace(",", "")
        elif dots == 1:
            whole, fraction = number_str.split(".")
            # 52.500 reads as fifty-two thousand five hundred
            if len(fraction) == 3 and len(whole) <= 3:
                normalized = whole + fraction
            else:
                normalized = number_str
        elif commas == 1:
            whole, fraction = number_str.split(",")
            if len(fraction) == 3:
                normalized = whole + fraction
            else:
                normalized = f"{whole}.{fraction}"
        else:
            normalized = number_str

        try:
            return Decimal(normalized)
        except InvalidOperation:
            return None
