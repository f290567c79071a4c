"""
Shared field types for the entity models.

Hours and money are held as ``Decimal`` in memory and written out as plain
JSON numbers.
"""
from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer


def _to_number(value: Decimal) -> float:
    return float(value)


Amount = Annotated[Decimal, PlainSerializer(_to_number, return_type=float, when_used="json")]

ZERO = Decimal("0")
