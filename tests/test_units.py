from decimal import Decimal, localcontext

import pytest

from app.services.units import (
    Q96,
    format_token_amount,
    format_units,
    normalize_gas_price,
    trim_decimals,
)


def test_normalize_gas_price_q96_is_one() -> None:
    assert normalize_gas_price("79228162514264337593543950336") == Decimal(1)


def test_normalize_gas_price_large_value_is_exact() -> None:
    raw = 3 * Q96 + Q96 // 4  # 3.25 in 2^96 fixed point, well past 2^64
    assert normalize_gas_price(str(raw)) == Decimal("3.25")


def test_normalize_gas_price_tiny_value_keeps_all_digits() -> None:
    ratio = normalize_gas_price("1")
    with localcontext() as ctx:
        ctx.prec = 200
        assert ratio * Q96 == 1
        assert ratio == Decimal(1) / Decimal(Q96)


def test_normalize_gas_price_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        normalize_gas_price("not-a-number")
    with pytest.raises(ValueError):
        normalize_gas_price("NaN")


def test_format_units() -> None:
    assert format_units("1500000", 6) == "1.5"
    assert format_units("1000000000000000000", 18) == "1"
    assert format_units("5", 8) == "0.00000005"
    assert format_units("0", 6) == "0"
    assert format_units("42", 0) == "42"


def test_trim_decimals_truncates_never_rounds() -> None:
    assert trim_decimals("1.9999999", 6) == "1.999999"
    assert trim_decimals("12", 6) == "12"


def test_format_token_amount_truncates_for_display() -> None:
    assert format_token_amount("123456789123456789", 18, digits=6) == "0.123456"
    assert format_token_amount("3100123", 8) == "0.031001"
    assert format_token_amount("1999999999", 6) == "1999.999999"


def test_format_token_amount_passes_through_non_integers() -> None:
    assert format_token_amount("n/a", 6) == "n/a"
