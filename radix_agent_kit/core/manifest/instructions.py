from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Self

from radix_agent_kit.core.manifest.formatter import format_value
from radix_agent_kit.core.manifest.values import (
    ENTIRE_WORKTOP,
    NONE,
    AddressValue,
    BucketValue,
    DecimalValue,
    ManifestValue,
    StringValue,
)

_INDENT = "    "


@dataclass(frozen=True)
class Instruction:
    name: str
    args: tuple[Any, ...] = ()

    def render(self) -> str:
        if not self.args:
            return f"{self.name};"
        lines = [self.name]
        lines.extend(f"{_INDENT}{format_value(arg)}" for arg in self.args)
        return "\n".join(lines) + "\n;"


@dataclass(frozen=True)
class Manifest:
    instructions: tuple[Instruction, ...] = ()

    def render(self) -> str:
        return "\n".join(i.render() for i in self.instructions) + "\n"

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self.instructions)

    def instruction_names(self) -> list[str]:
        return [i.name for i in self.instructions]

    def method_calls(self) -> list[tuple[str, str]]:
        """``(address, method)`` for every CALL_METHOD, in order."""
        calls = []
        for i in self.instructions:
            if i.name == "CALL_METHOD":
                target, method = i.args[0], i.args[1]
                address = target.address if isinstance(target, AddressValue) else target
                name = method.text if isinstance(method, StringValue) else method
                calls.append((str(address), str(name)))
        return calls


def _address(value: str | ManifestValue) -> ManifestValue:
    return value if isinstance(value, ManifestValue) else AddressValue(value)


def _decimal(value: Decimal | str | int) -> DecimalValue:
    return value if isinstance(value, DecimalValue) else DecimalValue(Decimal(value))


@dataclass
class ManifestBuilder:
    """Accumulates instructions; ``build()`` returns an immutable ``Manifest``."""

    instructions: list[Instruction] = field(default_factory=list)
    _bucket_count: int = field(default=0, init=False)

    def add(self, name: str, *args: Any) -> Self:
        self.instructions.append(Instruction(name, tuple(args)))
        return self

    def new_bucket(self) -> BucketValue:
        self._bucket_count += 1
        return BucketValue(f"bucket{self._bucket_count}")

    def call_method(
        self, address: str | ManifestValue, method: str, *args: Any
    ) -> Self:
        return self.add("CALL_METHOD", _address(address), StringValue(method), *args)

    def call_function(
        self, package: str | ManifestValue, blueprint: str, function: str, *args: Any
    ) -> Self:
        return self.add(
            "CALL_FUNCTION",
            _address(package),
            StringValue(blueprint),
            StringValue(function),
            *args,
        )

    def lock_fee(self, account: str, amount: Decimal | str) -> Self:
        return self.call_method(account, "lock_fee", _decimal(amount))

    def withdraw(self, account: str, resource: str, amount: Decimal | str) -> Self:
        return self.call_method(
            account, "withdraw", AddressValue(resource), _decimal(amount)
        )

    def withdraw_non_fungibles(
        self, account: str, resource: str, ids: list[ManifestValue]
    ) -> Self:
        return self.call_method(
            account, "withdraw_non_fungibles", AddressValue(resource), ids
        )

    def create_proof_of_amount(
        self, account: str, resource: str, amount: Decimal | str = "1"
    ) -> Self:
        return self.call_method(
            account, "create_proof_of_amount", AddressValue(resource), _decimal(amount)
        )

    def take_from_worktop(self, resource: str, amount: Decimal | str) -> BucketValue:
        bucket = self.new_bucket()
        self.add("TAKE_FROM_WORKTOP", AddressValue(resource), _decimal(amount), bucket)
        return bucket

    def take_all_from_worktop(self, resource: str) -> BucketValue:
        bucket = self.new_bucket()
        self.add("TAKE_ALL_FROM_WORKTOP", AddressValue(resource), bucket)
        return bucket

    def assert_worktop_contains(self, resource: str, amount: Decimal | str) -> Self:
        return self.add(
            "ASSERT_WORKTOP_CONTAINS", AddressValue(resource), _decimal(amount)
        )

    def deposit(self, account: str, bucket: BucketValue) -> Self:
        return self.call_method(account, "try_deposit_or_abort", bucket, NONE)

    def deposit_entire_worktop(self, account: str) -> Self:
        return self.call_method(
            account, "try_deposit_batch_or_abort", ENTIRE_WORKTOP, NONE
        )

    def build(self) -> Manifest:
        return Manifest(tuple(self.instructions))
