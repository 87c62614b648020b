"""Render Python values as Radix transaction manifest literals.

``format_value`` is pure and deterministic. Every supported shape produces
manifest text; shapes the ledger would not understand degrade to a quoted
string rather than raising, so a bad argument surfaces as a ledger rejection
instead of a local crash. Only cyclic containers raise ``FormattingError``.

Integers inside a container share one type: the narrowest that holds every
integer in it, nested arrays included, so ``[1, 2**40]`` renders as
``Array<u64>(1u64, 1099511627776u64)``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from radix_agent_kit.core.errors import FormattingError
from radix_agent_kit.core.manifest.values import ManifestValue, quote
from radix_agent_kit.core.utils.addresses import is_address_literal
from radix_agent_kit.core.utils.units import decimal_to_str

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _int_type(value: int) -> str:
    if value < 0:
        return "i64" if value >= _I64_MIN else "i128"
    if value <= _U32_MAX:
        return "u32"
    if value <= _U64_MAX:
        return "u64"
    return "u128"


def _format_int(value: int, int_type: str | None = None) -> str:
    return f"{value}{int_type or _int_type(value)}"


def _widest_int_type(values: list[int]) -> str | None:
    """Smallest integer type that holds every value, or None for no values."""
    if not values:
        return None
    lo, hi = min(values), max(values)
    if lo < 0:
        return "i64" if lo >= _I64_MIN and hi <= _I64_MAX else "i128"
    return _int_type(hi)


def _format_decimal(value: Decimal) -> str:
    if not value.is_finite():
        return quote(str(value))
    return f"Decimal({quote(decimal_to_str(value))})"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, list | tuple | set | frozenset)


def _items(value: Any) -> list[Any]:
    # Sets have no stable order; sort them so output is reproducible.
    if isinstance(value, set | frozenset):
        return sorted(value, key=repr)
    return list(value)


def _integer_leaves(items: list[Any], seen: frozenset[int]) -> list[int]:
    """Integers in ``items`` and in any arrays nested inside them."""
    found: list[int] = []
    for item in items:
        if isinstance(item, bool | ManifestValue):
            continue
        if isinstance(item, int):
            found.append(item)
        elif isinstance(item, float) and item.is_integer():
            found.append(int(item))
        elif _is_sequence(item):
            if id(item) in seen:
                raise FormattingError("Cannot format a container that contains itself")
            found.extend(_integer_leaves(_items(item), seen | {id(item)}))
    return found


def element_type(
    value: Any, _seen: frozenset[int] = frozenset(), *, int_type: str | None = None
) -> str:
    """Manifest type name used for a container whose first element is ``value``.

    ``int_type`` overrides the per-value integer type when the container has
    already settled on one.
    """
    if isinstance(value, ManifestValue):
        return value.type_name
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return int_type or _int_type(value)
    if isinstance(value, float):
        if value.is_integer():
            return int_type or _int_type(int(value))
        return "Decimal"
    if isinstance(value, Decimal):
        return "Decimal"
    if isinstance(value, str):
        return "Address" if is_address_literal(value) else "String"
    if _is_sequence(value):
        if id(value) in _seen:
            raise FormattingError("Cannot format a container that contains itself")
        seen = _seen | {id(value)}
        items = _items(value)
        if not items:
            return "Array<Any>"
        inner_int = int_type or _widest_int_type(_integer_leaves(items, seen))
        return f"Array<{element_type(items[0], seen, int_type=inner_int)}>"
    if isinstance(value, Mapping):
        return "Map"
    return "String"


def _format(value: Any, seen: set[int], int_type: str | None = None) -> str:
    if isinstance(value, ManifestValue):
        return value.render()
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return _format_int(value, int_type)
    if isinstance(value, float):
        if value.is_integer():
            return _format_int(int(value), int_type)
        return _format_decimal(Decimal(repr(value)))
    if isinstance(value, Decimal):
        return _format_decimal(value)
    if isinstance(value, str):
        return f"Address({quote(value)})" if is_address_literal(value) else quote(value)
    if isinstance(value, bytes | bytearray):
        return f'Bytes("{bytes(value).hex()}")'

    if _is_sequence(value) or isinstance(value, Mapping):
        marker = id(value)
        if marker in seen:
            raise FormattingError("Cannot format a container that contains itself")
        seen = seen | {marker}
        if isinstance(value, Mapping):
            # A map settles its own value type, even inside an array.
            return _format_map(value, seen)
        return _format_array(_items(value), seen, int_type)

    return quote(str(value))


def _format_array(items: list[Any], seen: set[int], int_type: str | None) -> str:
    if not items:
        return "Array<Any>()"
    int_type = int_type or _widest_int_type(_integer_leaves(items, frozenset(seen)))
    inner = element_type(items[0], frozenset(seen), int_type=int_type)
    rendered = ", ".join(_format(item, seen, int_type) for item in items)
    return f"Array<{inner}>({rendered})"


def _format_map(mapping: Mapping[Any, Any], seen: set[int]) -> str:
    values = list(mapping.values())
    if not values:
        return "Map<String, Any>()"
    int_type = _widest_int_type(_integer_leaves(values, frozenset(seen)))
    inner = element_type(values[0], frozenset(seen), int_type=int_type)
    entries = ", ".join(
        f"{quote(str(k))} => {_format(v, seen, int_type)}" for k, v in mapping.items()
    )
    return f"Map<String, {inner}>({entries})"


def format_value(value: Any) -> str:
    return _format(value, set())


def format_arguments(args: Iterable[Any] | None) -> list[str]:
    return [format_value(arg) for arg in (args or ())]
