from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from typing import Union

Number = Union[int, str, Decimal]

# Fixed-point scale used by the router for gas_price_token_in
Q96_EXPONENT = 96
Q96 = 2 ** Q96_EXPONENT

# Holds any uint256 divided by 2^96 without rounding
PRECISION = 200


def to_decimal(value: Number) -> Decimal:
    """Parse a numeric value into a finite Decimal"""
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def normalize_gas_price(raw: Number, exponent: int = Q96_EXPONENT) -> Decimal:
    """
    Convert a fixed-point gas price (scaled by 2^exponent) into a plain ratio.

    Args:
        raw: Fixed-point value as returned by the router
        exponent: Power of two the value is scaled by

    Returns:
        raw / 2^exponent as an exact Decimal
    """
    value = to_decimal(raw)
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return value / Decimal(2 ** exponent)


def _parse_int(value: Number) -> int:
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text or not text.lstrip("-").isdigit():
        raise ValueError(f"Not a base-unit integer: {value!r}")
    return int(text)


def format_units(value: Number, decimals: int) -> str:
    """Render a base-unit integer as a decimal string, e.g. ("1500000", 6) -> "1.5" """
    amount = _parse_int(value)
    negative = amount < 0
    whole, fraction = divmod(abs(amount), 10 ** decimals)
    text = str(whole)
    if decimals > 0 and fraction:
        text += "." + str(fraction).rjust(decimals, "0").rstrip("0")
    return f"-{text}" if negative else text


def trim_decimals(value: str, digits: int = 6) -> str:
    """Truncate the fractional part to at most `digits` characters, never rounding"""
    whole, _, fraction = value.partition(".")
    if not fraction:
        return value
    fraction = fraction[:digits]
    return f"{whole}.{fraction}" if fraction else whole


def format_token_amount(value: str, decimals: int, digits: int = 6) -> str:
    try:
        return trim_decimals(format_units(value, decimals), digits)
    except ValueError:
        return value
