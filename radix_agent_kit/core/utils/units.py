from __future__ import annotations

from decimal import Decimal, InvalidOperation

from radix_agent_kit.core.errors import ValidationError


def _to_decimal(value: str | int | float | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def parse_amount(
    value: str | int | float | Decimal, *, field: str = "amount"
) -> Decimal:
    """Parse a strictly positive, finite token amount."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}")
    try:
        amt = _to_decimal(value)
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid {field}: {value!r}") from exc
    if not amt.is_finite():
        raise ValidationError(f"Invalid {field}: {value!r}")
    if amt <= 0:
        raise ValidationError(f"{field} must be positive, got {value}")
    return amt


def parse_non_negative_amount(
    value: str | int | float | Decimal, *, field: str = "amount"
) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}")
    try:
        amt = _to_decimal(value)
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid {field}: {value!r}") from exc
    if not amt.is_finite() or amt < 0:
        raise ValidationError(f"{field} must be non-negative, got {value}")
    return amt


def decimal_to_str(value: Decimal) -> str:
    """Plain notation, no exponent and no trailing zeros after the point."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
