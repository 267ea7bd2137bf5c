"""Shared schema types.

Monetary values leave the API as strings with exactly 2 decimal places so
clients never see binary float rounding.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BeforeValidator


def format_money(value: Decimal | float | int | str) -> str:
    """Render an amount with 2 decimal places ("18.99", "0.00")."""
    return f"{Decimal(str(value)):.2f}"


Money = Annotated[str, BeforeValidator(format_money)]
