# cardapio/utils/money.py

# Money helpers. All prices are Decimal; format_brl is the single place that
# renders currency for the API and the order message (pt-BR, "R$ 1.234,56" with
# a no-break space after the symbol).

from __future__ import annotations
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0")
NBSP = "\u00a0"

Number = Union[Decimal, int, float, str]


def to_money(value: Number | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through str so 0.1 stays 0.1
        return Decimal(str(value))
    return Decimal(value)


def format_brl(value: Number | None) -> str:
    amount = to_money(value).quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,.2f}"  # 1,234.56
    grouped = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R${NBSP}{grouped}"
