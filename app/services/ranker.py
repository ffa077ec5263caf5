import math
from decimal import Decimal
from typing import List, Optional, Union
from app.models import OrderBy, QuoteRow
from app.services.units import to_decimal


def resolve_order(value: Optional[Union[str, OrderBy]]) -> OrderBy:
    """Map a requested ordering onto OrderBy, defaulting to net"""
    try:
        return OrderBy(value)
    except ValueError:
        return OrderBy.NET


def _amount_out(row: QuoteRow) -> Union[Decimal, float]:
    if row.amount_out is None:
        return -math.inf
    try:
        return to_decimal(row.amount_out)
    except ValueError:
        return -math.inf


def rank_quotes(rows: List[QuoteRow], order: OrderBy) -> List[QuoteRow]:
    """Return a new list sorted for `order`; ties keep no particular order"""
    if order == OrderBy.SCORE:
        return sorted(rows, key=lambda row: row.score)
    if order == OrderBy.OUTPUT:
        return sorted(rows, key=_amount_out, reverse=True)
    return sorted(rows, key=lambda row: row.net_output, reverse=True)
