"""Manifest templates for every supported operation.

Each builder validates its structured parameters first, then assembles the
usual skeleton: lock the fee, withdraw, move into named buckets, act, deposit
whatever is left back to the account.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from radix_agent_kit.core.constants.base import (
    DEFAULT_DIVISIBILITY,
    DEFAULT_POOL_FEE_TIER,
    FEE_POOL_CREATION,
    FEE_RESOURCE_CREATION,
    FEE_STANDARD,
    MAX_DIVISIBILITY,
    MIN_POOL_WEIGHT,
    POOL_FEE_TIERS,
)
from radix_agent_kit.core.constants.networks import POOL_VARIANTS, NetworkConfig
from radix_agent_kit.core.errors import NetworkUnsupportedError, ValidationError
from radix_agent_kit.core.manifest.formatter import format_value
from radix_agent_kit.core.manifest.instructions import Manifest, ManifestBuilder
from radix_agent_kit.core.manifest.values import (
    NONE,
    TRUE,
    AddressValue,
    DecimalValue,
    EnumValue,
    ManifestValue,
    NonFungibleLocalIdValue,
    RawValue,
    SomeValue,
    StringValue,
    TupleValue,
    U8Value,
    quote,
)
from radix_agent_kit.core.utils.units import parse_amount, parse_non_negative_amount

OWNER_ROLE_NONE = EnumValue("OwnerRole::None")
NON_FUNGIBLE_ID_TYPES = ("Integer", "String", "Bytes", "RUID")

# Empty non-fungible data schema (no typed fields).
_EMPTY_NF_SCHEMA = RawValue(
    "Enum<0u8>(Enum<0u8>(Tuple(Array<Enum>(), Array<Tuple>(), Array<Enum>())), "
    "Enum<0u8>(66u8), Array<String>())"
)

_URL_METADATA_KEYS = {"icon_url", "info_url"}


def _metadata_entry(key: str, value: Any) -> str:
    kind = "Url" if key in _URL_METADATA_KEYS else "String"
    entry = EnumValue(f"Metadata::{kind}", (StringValue(str(value)),))
    locked = TupleValue((SomeValue(entry), TRUE))
    return f"{quote(key)} => {locked.render()}"


def metadata_init(metadata: Mapping[str, Any]) -> RawValue:
    """Locked metadata entries for a new resource. ``None`` values are skipped."""
    entries = ", ".join(
        _metadata_entry(k, v) for k, v in metadata.items() if v is not None
    )
    return RawValue(f"Tuple(Map<String, Tuple>({entries}), Map<String, Enum>())")


def require_resource_rule(badge_address: str) -> EnumValue:
    resource = EnumValue(
        "ResourceOrNonFungible::Resource", (AddressValue(badge_address),)
    )
    rule = EnumValue("ProofRule::Require", (resource,))
    node = EnumValue("AccessRuleNode::ProofRule", (rule,))
    return EnumValue("AccessRule::Protected", (node,))


def _resource_roles(count: int, minter_badge_address: str | None) -> TupleValue:
    roles: list[ManifestValue] = [NONE] * count
    if minter_badge_address:
        rule = SomeValue(require_resource_rule(minter_badge_address))
        roles[0] = SomeValue(TupleValue((rule, rule)))
    return TupleValue(tuple(roles))


def _resource_metadata(
    *,
    name: str,
    symbol: str | None = None,
    description: str | None = None,
    icon_url: str | None = None,
    extra: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name}
    if symbol:
        metadata["symbol"] = symbol
    if description:
        metadata["description"] = description
    if icon_url:
        metadata["icon_url"] = icon_url
    for key, value in (extra or {}).items():
        metadata.setdefault(str(key), value)
    return metadata


def transfer_manifest(
    *,
    from_account: str,
    to_account: str,
    resource_address: str,
    amount: Decimal | str,
    fee: str = FEE_STANDARD,
) -> Manifest:
    amt = parse_amount(amount)
    b = ManifestBuilder().lock_fee(from_account, fee)
    b.withdraw(from_account, resource_address, amt)
    bucket = b.take_from_worktop(resource_address, amt)
    b.deposit(to_account, bucket)
    return b.build()


def stake_manifest(
    *,
    account: str,
    validator_address: str,
    xrd_address: str,
    amount: Decimal | str,
    fee: str = FEE_STANDARD,
) -> Manifest:
    amt = parse_amount(amount)
    b = ManifestBuilder().lock_fee(account, fee)
    b.withdraw(account, xrd_address, amt)
    bucket = b.take_from_worktop(xrd_address, amt)
    b.call_method(validator_address, "stake", bucket)
    b.deposit_entire_worktop(account)
    return b.build()


def unstake_manifest(
    *,
    account: str,
    validator_address: str,
    stake_unit_address: str,
    amount: Decimal | str,
    fee: str = FEE_STANDARD,
) -> Manifest:
    amt = parse_amount(amount)
    b = ManifestBuilder().lock_fee(account, fee)
    b.withdraw(account, stake_unit_address, amt)
    bucket = b.take_from_worktop(stake_unit_address, amt)
    b.call_method(validator_address, "unstake", bucket)
    b.deposit_entire_worktop(account)
    return b.build()


def claim_manifest(
    *,
    account: str,
    validator_address: str,
    claim_nft_address: str | None = None,
    claim_nft_ids: Sequence[int | str] | None = None,
    fee: str = FEE_STANDARD,
) -> Manifest:
    """Claim unstaked XRD.

    With a claim NFT resource the receipts are withdrawn and handed to the
    validator; without one the validator is asked to claim for the account.
    """
    b = ManifestBuilder().lock_fee(account, fee)
    if claim_nft_address:
        if claim_nft_ids:
            ids = [NonFungibleLocalIdValue.from_id(i) for i in claim_nft_ids]
            b.withdraw_non_fungibles(account, claim_nft_address, ids)
        else:
            b.withdraw(account, claim_nft_address, Decimal(1))
        bucket = b.take_all_from_worktop(claim_nft_address)
        b.call_method(validator_address, "claim_xrd", bucket)
    else:
        b.call_method(validator_address, "claim_xrd", AddressValue(account))
    b.deposit_entire_worktop(account)
    return b.build()


def create_fungible_manifest(
    *,
    owner_account: str,
    name: str,
    symbol: str,
    initial_supply: Decimal | str,
    divisibility: int = DEFAULT_DIVISIBILITY,
    description: str | None = None,
    icon_url: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    minter_badge_address: str | None = None,
    fee: str = FEE_RESOURCE_CREATION,
) -> Manifest:
    if not str(name or "").strip():
        raise ValidationError("Token name is required")
    if not str(symbol or "").strip():
        raise ValidationError("Token symbol is required")
    if isinstance(divisibility, bool) or not isinstance(divisibility, int):
        raise ValidationError(f"Invalid divisibility: {divisibility!r}")
    if not 0 <= divisibility <= MAX_DIVISIBILITY:
        raise ValidationError(
            f"divisibility must be between 0 and {MAX_DIVISIBILITY}, got {divisibility}"
        )
    supply = parse_amount(initial_supply, field="initial_supply")

    meta = _resource_metadata(
        name=name.strip(),
        symbol=symbol.strip().upper(),
        description=description,
        icon_url=icon_url,
        extra=metadata,
    )
    b = ManifestBuilder().lock_fee(owner_account, fee)
    b.add(
        "CREATE_FUNGIBLE_RESOURCE_WITH_INITIAL_SUPPLY",
        OWNER_ROLE_NONE,
        True,
        U8Value(divisibility),
        DecimalValue(supply),
        _resource_roles(6, minter_badge_address),
        metadata_init(meta),
        NONE,
    )
    b.deposit_entire_worktop(owner_account)
    return b.build()


def create_non_fungible_manifest(
    *,
    owner_account: str,
    name: str,
    description: str | None = None,
    icon_url: str | None = None,
    id_type: str = "Integer",
    metadata: Mapping[str, Any] | None = None,
    minter_badge_address: str | None = None,
    fee: str = FEE_RESOURCE_CREATION,
) -> Manifest:
    if not str(name or "").strip():
        raise ValidationError("Collection name is required")
    if id_type not in NON_FUNGIBLE_ID_TYPES:
        raise ValidationError(
            f"Invalid id_type '{id_type}', expected one of {NON_FUNGIBLE_ID_TYPES}"
        )
    meta = _resource_metadata(
        name=name.strip(), description=description, icon_url=icon_url, extra=metadata
    )
    b = ManifestBuilder().lock_fee(owner_account, fee)
    b.add(
        "CREATE_NON_FUNGIBLE_RESOURCE",
        OWNER_ROLE_NONE,
        EnumValue(f"NonFungibleIdType::{id_type}"),
        True,
        _EMPTY_NF_SCHEMA,
        _resource_roles(7, minter_badge_address),
        metadata_init(meta),
        NONE,
    )
    return b.build()


def mint_fungible_manifest(
    *,
    account: str,
    resource_address: str,
    amount: Decimal | str,
    to_account: str | None = None,
    badge_address: str | None = None,
    fee: str = FEE_STANDARD,
) -> Manifest:
    amt = parse_amount(amount)
    b = ManifestBuilder().lock_fee(account, fee)
    if badge_address:
        b.create_proof_of_amount(account, badge_address)
    b.add("MINT_FUNGIBLE", AddressValue(resource_address), DecimalValue(amt))
    b.deposit_entire_worktop(to_account or account)
    return b.build()


def mint_non_fungible_manifest(
    *,
    account: str,
    resource_address: str,
    nft_id: int | str,
    data: Mapping[str, Any] | None = None,
    to_account: str | None = None,
    badge_address: str | None = None,
    fee: str = FEE_STANDARD,
) -> Manifest:
    if nft_id is None or str(nft_id).strip() == "":
        raise ValidationError("nft_id is required")
    local_id = NonFungibleLocalIdValue.from_id(nft_id)
    fields = ", ".join(format_value(v) for v in (data or {}).values())
    entries = RawValue(
        f"Map<NonFungibleLocalId, Tuple>({local_id.render()} => Tuple(Tuple({fields})))"
    )
    b = ManifestBuilder().lock_fee(account, fee)
    if badge_address:
        b.create_proof_of_amount(account, badge_address)
    b.add("MINT_NON_FUNGIBLE", AddressValue(resource_address), entries)
    b.deposit_entire_worktop(to_account or account)
    return b.build()


def validate_fee_tier(fee_tier: int) -> int:
    if isinstance(fee_tier, bool) or fee_tier not in POOL_FEE_TIERS:
        raise ValidationError(
            f"Invalid fee tier: {fee_tier}. "
            f"Supported tiers (bps): {list(POOL_FEE_TIERS)}"
        )
    return int(fee_tier)


def validate_pool_weights(weights: Sequence[int] | None) -> tuple[int, int]:
    if (
        not isinstance(weights, Sequence)
        or isinstance(weights, str)
        or len(weights) != 2
    ):
        raise ValidationError("Asset ratio must be exactly two weights")
    w1, w2 = weights
    for w in (w1, w2):
        if isinstance(w, bool) or not isinstance(w, int):
            raise ValidationError(
                f"Asset ratio weights must be integers, got {weights}"
            )
        if w < MIN_POOL_WEIGHT:
            raise ValidationError(
                f"Each asset ratio weight must be at least {MIN_POOL_WEIGHT}, "
                f"got {list(weights)}"
            )
    if w1 + w2 != 100:
        raise ValidationError(f"Asset ratio must sum to 100, got {list(weights)}")
    return w1, w2


def create_pool_manifest(
    *,
    account: str,
    network: NetworkConfig,
    resource_address_1: str,
    resource_address_2: str,
    amount_1: Decimal | str,
    amount_2: Decimal | str,
    variant: str = "standard",
    fee_tier: int = DEFAULT_POOL_FEE_TIER,
    weights: Sequence[int] | None = None,
    hook_address: str | None = None,
    fee: str = FEE_POOL_CREATION,
) -> Manifest:
    if variant not in POOL_VARIANTS:
        raise ValidationError(f"Unknown pool variant '{variant}'")
    if resource_address_1 == resource_address_2:
        raise ValidationError("Cannot create a pool with the same resource twice")
    amt1 = parse_amount(amount_1, field="amount_1")
    amt2 = parse_amount(amount_2, field="amount_2")
    tier = validate_fee_tier(fee_tier)
    extra_args: list[Any] = []
    if variant == "imbalanced":
        w1, w2 = validate_pool_weights(weights)
        extra_args = [U8Value(w1), U8Value(w2)]
    elif variant == "hooked":
        if not hook_address:
            raise ValidationError("hook_address is required for a hooked pool")
        extra_args = [AddressValue(hook_address)]

    exchange = network.exchange
    if exchange is None:
        raise NetworkUnsupportedError("create_pool", network.name)
    if not exchange.is_configured(variant):
        raise NetworkUnsupportedError(
            "create_pool",
            network.name,
            f"{variant} pools are not configured for network '{network.name}'",
        )

    fee_rate = Decimal(tier) / Decimal(10_000)
    b = ManifestBuilder().lock_fee(account, fee)
    b.withdraw(account, resource_address_1, amt1)
    b.withdraw(account, resource_address_2, amt2)
    bucket1 = b.take_from_worktop(resource_address_1, amt1)
    bucket2 = b.take_from_worktop(resource_address_2, amt2)
    args = [bucket1, bucket2, DecimalValue(fee_rate), *extra_args]
    if exchange.mode == "package":
        b.call_function(
            exchange.package_address,
            exchange.blueprints[variant],
            "instantiate_with_liquidity",
            *args,
        )
    else:
        b.call_method(
            exchange.factory_addresses[variant], "instantiate_with_liquidity", *args
        )
    b.deposit_entire_worktop(account)
    return b.build()


def add_liquidity_manifest(
    *,
    account: str,
    pool_address: str,
    resource_address_1: str,
    resource_address_2: str,
    amount_1: Decimal | str,
    amount_2: Decimal | str,
    fee: str = FEE_STANDARD,
) -> Manifest:
    amt1 = parse_amount(amount_1, field="amount_1")
    amt2 = parse_amount(amount_2, field="amount_2")
    b = ManifestBuilder().lock_fee(account, fee)
    b.withdraw(account, resource_address_1, amt1)
    b.withdraw(account, resource_address_2, amt2)
    bucket1 = b.take_from_worktop(resource_address_1, amt1)
    bucket2 = b.take_from_worktop(resource_address_2, amt2)
    b.call_method(pool_address, "add_liquidity", bucket1, bucket2)
    b.deposit_entire_worktop(account)
    return b.build()


def remove_liquidity_manifest(
    *,
    account: str,
    pool_address: str,
    lp_resource_address: str,
    amount: Decimal | str,
    min_amounts: Mapping[str, Decimal | str] | None = None,
    fee: str = FEE_STANDARD,
) -> Manifest:
    amt = parse_amount(amount)
    minimums = {
        res: parse_non_negative_amount(v, field="min_amount")
        for res, v in (min_amounts or {}).items()
    }
    b = ManifestBuilder().lock_fee(account, fee)
    b.withdraw(account, lp_resource_address, amt)
    bucket = b.take_from_worktop(lp_resource_address, amt)
    b.call_method(pool_address, "remove_liquidity", bucket)
    for resource, minimum in minimums.items():
        if minimum > 0:
            b.assert_worktop_contains(resource, minimum)
    b.deposit_entire_worktop(account)
    return b.build()


def swap_manifest(
    *,
    account: str,
    pool_address: str,
    from_resource_address: str,
    to_resource_address: str,
    amount_in: Decimal | str,
    min_amount_out: Decimal | str | None = None,
    fee: str = FEE_STANDARD,
) -> Manifest:
    if from_resource_address == to_resource_address:
        raise ValidationError("Cannot swap a resource for itself")
    amt = parse_amount(amount_in, field="amount_in")
    minimum = (
        parse_non_negative_amount(min_amount_out, field="min_amount_out")
        if min_amount_out is not None
        else Decimal(0)
    )
    b = ManifestBuilder().lock_fee(account, fee)
    b.withdraw(account, from_resource_address, amt)
    bucket = b.take_from_worktop(from_resource_address, amt)
    b.call_method(pool_address, "swap", bucket)
    if minimum > 0:
        b.assert_worktop_contains(to_resource_address, minimum)
    b.deposit_entire_worktop(account)
    return b.build()


def flash_loan_manifest(
    *,
    account: str,
    pool_address: str,
    resource_address: str,
    amount: Decimal | str,
    callback_component_address: str,
    callback_data: str = "",
    fee: str = FEE_STANDARD,
) -> Manifest:
    amt = parse_amount(amount)
    b = ManifestBuilder().lock_fee(account, fee)
    b.call_method(
        pool_address,
        "flash_loan",
        AddressValue(resource_address),
        DecimalValue(amt),
        AddressValue(callback_component_address),
        StringValue(callback_data or ""),
    )
    b.deposit_entire_worktop(account)
    return b.build()


def call_method_manifest(
    *,
    account: str,
    component_address: str,
    method_name: str,
    args: Sequence[Any] | None = None,
    fee: str = FEE_STANDARD,
) -> Manifest:
    if not str(method_name or "").strip():
        raise ValidationError("method_name is required")
    b = ManifestBuilder().lock_fee(account, fee)
    b.call_method(component_address, method_name.strip(), *(args or ()))
    b.deposit_entire_worktop(account)
    return b.build()


def faucet_manifest(
    *, account: str, faucet_address: str, fee: str = FEE_STANDARD
) -> Manifest:
    """Test-network faucet: the faucet pays the fee and hands out free XRD."""
    b = ManifestBuilder().lock_fee(faucet_address, fee)
    b.call_method(faucet_address, "free")
    b.deposit_entire_worktop(account)
    return b.build()
