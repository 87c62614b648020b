from __future__ import annotations

import re
from enum import StrEnum

from radix_agent_kit.core.constants.networks import NetworkConfig
from radix_agent_kit.core.errors import ValidationError


class AddressKind(StrEnum):
    ACCOUNT = "account"
    RESOURCE = "resource"
    COMPONENT = "component"
    VALIDATOR = "validator"
    PACKAGE = "package"
    POOL = "pool"
    ACCESS_CONTROLLER = "accesscontroller"
    LOCKER = "locker"
    INTERNAL = "internal"


# Longest prefixes first so "accesscontroller_" never matches as something else.
ENTITY_PREFIXES: tuple[str, ...] = tuple(
    sorted((f"{kind.value}_" for kind in AddressKind), key=len, reverse=True)
)

# <kind>_<hrp suffix><bech32m data>; the data part uses the bech32 charset.
_BECH32_DATA = re.compile(r"^[02-9ac-hj-np-z]+$")


def classify_address(value: str) -> AddressKind | None:
    if not isinstance(value, str):
        return None
    for prefix in ENTITY_PREFIXES:
        if value.startswith(prefix):
            return AddressKind(prefix[:-1])
    return None


def is_address_literal(value: str) -> bool:
    return classify_address(value) is not None


def validate_address(
    value: str,
    *,
    network: NetworkConfig,
    kinds: AddressKind | tuple[AddressKind, ...],
    field: str = "address",
) -> str:
    """Check entity kind and network HRP of an address; return it stripped."""
    expected = kinds if isinstance(kinds, tuple) else (kinds,)
    address = str(value or "").strip()
    kind = classify_address(address)
    if kind is None or kind not in expected:
        names = "/".join(k.value for k in expected)
        raise ValidationError(
            f"Invalid {field}: expected a {names} address, got {value!r}"
        )

    rest = address[len(kind.value) + 1 :]
    if not rest.startswith(network.hrp_suffix):
        raise ValidationError(
            f"Invalid {field}: {address} does not belong to network '{network.name}'"
        )
    data = rest[len(network.hrp_suffix) :]
    if len(data) < 6 or not _BECH32_DATA.match(data):
        raise ValidationError(f"Invalid {field}: malformed address {address}")
    return address
