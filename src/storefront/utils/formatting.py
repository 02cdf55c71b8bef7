import re
import unicodedata
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union


class FormattingUtils:
    """
    Data formatting utilities for consistent API responses

    Features:
    - Money normalization for storage and JSON output
    - Timestamp serialization
    - Slug generation for catalog URLs
    """

    MONEY_QUANTUM = Decimal("0.01")
    MAX_SLUG_LENGTH = 120

    @classmethod
    def to_decimal(cls, amount: Union[int, float, str, Decimal]) -> Decimal:
        """Normalize an amount to two decimal places"""
        return Decimal(str(amount)).quantize(cls.MONEY_QUANTUM, rounding=ROUND_HALF_UP)

    @classmethod
    def money_to_json(cls, amount: Optional[Union[int, float, Decimal]]) -> Optional[float]:
        """
        Money goes out as a plain JSON number.

        Examples:
            money_to_json(Decimal("12.50")) -> 12.5
            money_to_json(None) -> None
        """
        if amount is None:
            return None
        return float(amount)

    @classmethod
    def isoformat(cls, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None

    @classmethod
    def slugify(cls, text: str) -> str:
        """
        Build a URL slug from free text

        Examples:
            slugify("Classic Cotton T-Shirt") -> "classic-cotton-t-shirt"
            slugify("  Café  Noir ") -> "cafe-noir"
        """
        normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
        slug = re.sub(r"[^a-zA-Z0-9]+", "-", normalized).strip("-").lower()
        return slug[:cls.MAX_SLUG_LENGTH].rstrip("-")
