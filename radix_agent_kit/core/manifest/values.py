"""Typed manifest values.

Templates build instructions from these nodes instead of pasting strings, so
every argument knows how to render itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from radix_agent_kit.core.utils.units import decimal_to_str


def quote(text: str) -> str:
    escaped = (
        str(text)
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


class ManifestValue:
    type_name: ClassVar[str] = "Any"

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class AddressValue(ManifestValue):
    type_name = "Address"
    address: str

    def render(self) -> str:
        return f"Address({quote(self.address)})"


@dataclass(frozen=True)
class DecimalValue(ManifestValue):
    type_name = "Decimal"
    value: Decimal

    def render(self) -> str:
        return f"Decimal({quote(decimal_to_str(Decimal(self.value)))})"


@dataclass(frozen=True)
class BucketValue(ManifestValue):
    type_name = "Bucket"
    name: str

    def render(self) -> str:
        return f"Bucket({quote(self.name)})"


@dataclass(frozen=True)
class ExpressionValue(ManifestValue):
    type_name = "Expression"
    name: str

    def render(self) -> str:
        return f"Expression({quote(self.name)})"


ENTIRE_WORKTOP = ExpressionValue("ENTIRE_WORKTOP")


@dataclass(frozen=True)
class U8Value(ManifestValue):
    type_name = "u8"
    value: int

    def __post_init__(self) -> None:
        if not 0 <= int(self.value) <= 255:
            raise ValueError(f"u8 out of range: {self.value}")

    def render(self) -> str:
        return f"{int(self.value)}u8"


@dataclass(frozen=True)
class StringValue(ManifestValue):
    """Quoted string even when the text looks like an address."""

    type_name = "String"

    text: str

    def render(self) -> str:
        return quote(self.text)


@dataclass(frozen=True)
class EnumValue(ManifestValue):
    type_name = "Enum"
    variant: str
    fields: tuple[ManifestValue, ...] = ()

    def render(self) -> str:
        inner = ", ".join(f.render() for f in self.fields)
        return f"Enum<{self.variant}>({inner})"


@dataclass(frozen=True)
class TupleValue(ManifestValue):
    type_name = "Tuple"
    fields: tuple[ManifestValue, ...] = ()

    def render(self) -> str:
        return f"Tuple({', '.join(f.render() for f in self.fields)})"


@dataclass(frozen=True)
class SomeValue(ManifestValue):
    inner: ManifestValue

    def render(self) -> str:
        return f"Some({self.inner.render()})"


@dataclass(frozen=True)
class NonFungibleLocalIdValue(ManifestValue):
    """``#1#`` integer ids, ``<name>`` string ids."""

    type_name = "NonFungibleLocalId"

    local_id: str

    @classmethod
    def from_id(cls, value: int | str) -> NonFungibleLocalIdValue:
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(f"#{value}#")
        text = str(value).strip()
        if text.startswith(("#", "<", "[", "{")):
            return cls(text)
        if text.isdigit():
            return cls(f"#{text}#")
        return cls(f"<{text}>")

    def render(self) -> str:
        return f"NonFungibleLocalId({quote(self.local_id)})"


@dataclass(frozen=True)
class RawValue(ManifestValue):
    """Already-rendered manifest text."""

    text: str

    def render(self) -> str:
        return self.text


NONE = RawValue("None")
TRUE = RawValue("true")
