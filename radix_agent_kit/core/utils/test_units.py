from decimal import Decimal

import pytest

from radix_agent_kit.core.errors import ValidationError
from radix_agent_kit.core.utils.units import (
    decimal_to_str,
    parse_amount,
    parse_non_negative_amount,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("150", Decimal("150")),
        (" 1.25 ", Decimal("1.25")),
        (7, Decimal(7)),
        (0.1, Decimal("0.1")),
        (Decimal("3.5"), Decimal("3.5")),
    ],
)
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


@pytest.mark.parametrize("value", ["0", "-5", "abc", "", None, True, "NaN", "Infinity"])
def test_parse_amount_rejects(value):
    with pytest.raises(ValidationError):
        parse_amount(value)


def test_parse_amount_names_the_field():
    with pytest.raises(ValidationError, match="amount_in"):
        parse_amount("-1", field="amount_in")


def test_parse_non_negative_allows_zero():
    assert parse_non_negative_amount("0") == Decimal(0)
    with pytest.raises(ValidationError):
        parse_non_negative_amount("-0.1")


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("500000"), "500000"),
        (Decimal("1.500"), "1.5"),
        (Decimal("2.000"), "2"),
        (Decimal("1E+2"), "100"),
        (Decimal("0.00000001"), "0.00000001"),
        (Decimal("0"), "0"),
    ],
)
def test_decimal_to_str(value, expected):
    assert decimal_to_str(value) == expected
