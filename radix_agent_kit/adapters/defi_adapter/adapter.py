from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal
from typing import Any, Literal

from radix_agent_kit.core.adapters.BaseAdapter import BaseAdapter
from radix_agent_kit.core.adapters.decorators import operation_tuple, status_tuple
from radix_agent_kit.core.adapters.models import OperationResult
from radix_agent_kit.core.clients.GatewayClient import (
    GatewayClient,
    non_fungible_holdings,
)
from radix_agent_kit.core.constants.base import ADAPTER_DEFI, DEFAULT_POOL_FEE_TIER
from radix_agent_kit.core.constants.networks import NetworkConfig
from radix_agent_kit.core.errors import ValidationError
from radix_agent_kit.core.manifest.templates import (
    add_liquidity_manifest,
    claim_manifest,
    create_pool_manifest,
    flash_loan_manifest,
    remove_liquidity_manifest,
    stake_manifest,
    swap_manifest,
    unstake_manifest,
)
from radix_agent_kit.core.utils.addresses import AddressKind
from radix_agent_kit.core.utils.polling import EntityType
from radix_agent_kit.core.utils.units import parse_amount
from radix_agent_kit.core.wallet import RadixWallet

PoolVariant = Literal["standard", "imbalanced", "hooked"]

POOL_KINDS = (AddressKind.COMPONENT, AddressKind.POOL)
CLAIM_MARKERS = ("claim", "unstake")
_LP_FIELD_MARKERS = ("lp", "pool_unit", "liquidity")


def _looks_like_claim_receipt(metadata: dict[str, Any]) -> bool:
    for key, value in metadata.items():
        text = f"{key} {value}".lower()
        if any(marker in text for marker in CLAIM_MARKERS):
            return True
    return False


def _walk_state(node: Any, field_name: str = "") -> Iterator[tuple[str, Any]]:
    """Yield ``(field_name, leaf_value)`` pairs from programmatic SBOR JSON."""
    if isinstance(node, dict):
        name = str(node.get("field_name") or field_name)
        if "value" in node and not isinstance(node["value"], dict | list):
            yield name, node["value"]
        for key in ("fields", "elements", "entries"):
            for child in node.get(key) or []:
                yield from _walk_state(child, name)
        for key in ("key", "value"):
            if isinstance(node.get(key), dict | list):
                yield from _walk_state(node[key], name)
    elif isinstance(node, list):
        for child in node:
            yield from _walk_state(child, field_name)


def parse_pool_state(details: dict[str, Any]) -> dict[str, Any]:
    """Pull the pool's resource pair, LP token and flash-loan flag from its state."""
    state = details.get("state") or {}
    if not isinstance(state, dict):
        state = {}
    resources: list[str] = []
    lp_token: str | None = None
    flash_loans_enabled: bool | None = None

    explicit = state.get("resources")
    if isinstance(explicit, list):
        for entry in explicit:
            addr = entry.get("resource_address") if isinstance(entry, dict) else entry
            if isinstance(addr, str) and addr not in resources:
                resources.append(addr)
    pool_unit = state.get("pool_unit_resource_address")
    if isinstance(pool_unit, str):
        lp_token = pool_unit

    for name, value in _walk_state(state):
        lowered = name.lower()
        if isinstance(value, bool) and "flash" in lowered:
            flash_loans_enabled = value
            continue
        if not isinstance(value, str) or not value.startswith("resource_"):
            continue
        if any(marker in lowered for marker in _LP_FIELD_MARKERS):
            lp_token = lp_token or value
        elif value not in resources and value != lp_token:
            resources.append(value)

    return {
        "resources": resources,
        "lp_token": lp_token,
        "flash_loans_enabled": flash_loans_enabled,
    }


class DeFiAdapter(BaseAdapter):
    adapter_type = ADAPTER_DEFI

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        wallet: RadixWallet | None = None,
        gateway: GatewayClient | None = None,
        network: NetworkConfig | None = None,
    ) -> None:
        super().__init__(
            "defi_adapter", config, wallet=wallet, gateway=gateway, network=network
        )

    async def _validator_state(self, validator: str) -> dict[str, Any]:
        item = await self.gateway.get_entity_item(validator)
        if not item:
            raise ValidationError(f"Validator not found: {validator}")
        return (item.get("details") or {}).get("state") or {}

    async def _pool_details(self, pool_address: str) -> dict[str, Any]:
        item = await self.gateway.get_entity_item(pool_address)
        if not item:
            raise ValidationError(f"Pool not found: {pool_address}")
        return item.get("details") or {}

    @operation_tuple
    async def stake_xrd(
        self, *, validator_address: str, amount: str | int | Decimal
    ) -> OperationResult:
        account = self._require_wallet()
        validator = self._address(
            validator_address,
            AddressKind.VALIDATOR,
            "validator_address",
        )
        amt = parse_amount(amount)
        manifest = stake_manifest(
            account=account,
            validator_address=validator,
            xrd_address=self.network.xrd_address,
            amount=amt,
        )
        tx_id = await self._send(manifest, f"Stake {amt} XRD with {validator}")
        return self._result(tx_id, "stake_xrd")

    @operation_tuple
    async def unstake_xrd(
        self, *, validator_address: str, amount: str | int | Decimal
    ) -> OperationResult:
        account = self._require_wallet()
        validator = self._address(
            validator_address,
            AddressKind.VALIDATOR,
            "validator_address",
        )
        amt = parse_amount(amount)
        state = await self._validator_state(validator)
        stake_unit = state.get("stake_unit_resource_address")
        if not stake_unit:
            raise ValidationError(f"Validator {validator} has no stake unit resource")
        manifest = unstake_manifest(
            account=account,
            validator_address=validator,
            stake_unit_address=stake_unit,
            amount=amt,
        )
        tx_id = await self._send(manifest, f"Unstake {amt} from {validator}")
        return self._result(tx_id, "unstake_xrd")

    async def find_claim_receipts(
        self, account: str, validator: str
    ) -> dict[str, Any] | None:
        """Claim NFTs held by ``account`` for ``validator``, if any.

        Matches the validator's claim token when the gateway reports one,
        otherwise any non-fungible whose metadata mentions claim/unstake.
        """
        claim_token: str | None = None
        try:
            claim_token = (await self._validator_state(validator)).get(
                "claim_token_resource_address"
            )
        except ValidationError:
            claim_token = None

        balances = await self.gateway.get_account_balances(account)
        holdings = non_fungible_holdings(balances)
        for holding in holdings:
            if holding["count"] <= 0 and not holding["ids"]:
                continue
            if claim_token and holding["resource_address"] == claim_token:
                return holding
        if claim_token:
            return None
        for holding in holdings:
            if (holding["count"] > 0 or holding["ids"]) and _looks_like_claim_receipt(
                holding["metadata"]
            ):
                return holding
        return None

    @operation_tuple
    async def claim_xrd(self, *, validator_address: str) -> OperationResult:
        account = self._require_wallet()
        validator = self._address(
            validator_address,
            AddressKind.VALIDATOR,
            "validator_address",
        )
        receipt = await self.find_claim_receipts(account, validator)
        if receipt:
            self.logger.info(
                f"Claiming with {len(receipt['ids']) or receipt['count']} receipt(s) "
                f"of {receipt['resource_address']}"
            )
            manifest = claim_manifest(
                account=account,
                validator_address=validator,
                claim_nft_address=receipt["resource_address"],
                claim_nft_ids=receipt["ids"] or None,
            )
        else:
            self.logger.info("No claim receipts found; using direct claim")
            manifest = claim_manifest(account=account, validator_address=validator)
        tx_id = await self._send(manifest, f"Claim XRD from {validator}")
        return self._result(tx_id, "claim_xrd")

    @operation_tuple
    async def create_pool(
        self,
        *,
        resource_address_1: str,
        resource_address_2: str,
        amount_1: str | int | Decimal,
        amount_2: str | int | Decimal,
        variant: PoolVariant = "standard",
        fee_tier: int = DEFAULT_POOL_FEE_TIER,
        asset_ratio: list[int] | None = None,
        hook_address: str | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        self._require_exchange("create_pool")
        r1 = self._address(
            resource_address_1,
            AddressKind.RESOURCE,
            "resource_address_1",
        )
        r2 = self._address(
            resource_address_2,
            AddressKind.RESOURCE,
            "resource_address_2",
        )
        if hook_address:
            hook_address = self._address(
                hook_address,
                AddressKind.COMPONENT,
                "hook_address",
            )
        manifest = create_pool_manifest(
            account=account,
            network=self.network,
            resource_address_1=r1,
            resource_address_2=r2,
            amount_1=amount_1,
            amount_2=amount_2,
            variant=variant,
            fee_tier=fee_tier,
            weights=asset_ratio,
            hook_address=hook_address,
        )
        tx_id = await self._send(manifest, f"Create {variant} pool")
        return await self._extract(
            tx_id, EntityType.GLOBAL_GENERIC_COMPONENT, "create_pool"
        )

    async def create_hooked_pool(
        self, *, hook_address: str, **kwargs: Any
    ) -> tuple[bool, OperationResult | str]:
        return await self.create_pool(
            variant="hooked", hook_address=hook_address, **kwargs
        )

    async def _pool_resources(
        self, pool: str, resource_1: str | None, resource_2: str | None
    ) -> tuple[str, str]:
        if resource_1 and resource_2:
            return (
                self._address(resource_1, AddressKind.RESOURCE, "resource_address_1"),
                self._address(resource_2, AddressKind.RESOURCE, "resource_address_2"),
            )
        info = parse_pool_state(await self._pool_details(pool))
        if len(info["resources"]) < 2:
            raise ValidationError(
                f"Could not determine the resource pair of pool {pool}"
            )
        return info["resources"][0], info["resources"][1]

    @operation_tuple
    async def add_liquidity(
        self,
        *,
        pool_address: str,
        amount_1: str | int | Decimal,
        amount_2: str | int | Decimal,
        resource_address_1: str | None = None,
        resource_address_2: str | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        self._require_exchange("add_liquidity")
        pool = self._address(pool_address, POOL_KINDS, "pool_address")
        amt1 = parse_amount(amount_1, field="amount_1")
        amt2 = parse_amount(amount_2, field="amount_2")
        r1, r2 = await self._pool_resources(
            pool, resource_address_1, resource_address_2
        )
        manifest = add_liquidity_manifest(
            account=account,
            pool_address=pool,
            resource_address_1=r1,
            resource_address_2=r2,
            amount_1=amt1,
            amount_2=amt2,
        )
        tx_id = await self._send(manifest, f"Add liquidity to {pool}")
        return self._result(tx_id, "add_liquidity")

    @operation_tuple
    async def remove_liquidity(
        self,
        *,
        pool_address: str,
        amount_lp: str | int | Decimal,
        lp_resource_address: str | None = None,
        min_amount_1: str | Decimal | None = None,
        min_amount_2: str | Decimal | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        self._require_exchange("remove_liquidity")
        pool = self._address(pool_address, POOL_KINDS, "pool_address")
        amt = parse_amount(amount_lp, field="amount_lp")
        info: dict[str, Any] = {"resources": [], "lp_token": None}
        needs_minimums = min_amount_1 is not None or min_amount_2 is not None
        if not lp_resource_address or needs_minimums:
            info = parse_pool_state(await self._pool_details(pool))
        lp = lp_resource_address or info["lp_token"]
        if not lp:
            raise ValidationError(f"Could not determine the LP token of pool {pool}")
        lp = self._address(lp, AddressKind.RESOURCE, "lp_resource_address")

        min_amounts: dict[str, Any] = {}
        for index, minimum in enumerate((min_amount_1, min_amount_2)):
            if minimum is None:
                continue
            if len(info["resources"]) <= index:
                raise ValidationError(
                    f"Could not determine the resource pair of pool {pool}"
                )
            min_amounts[info["resources"][index]] = minimum

        manifest = remove_liquidity_manifest(
            account=account,
            pool_address=pool,
            lp_resource_address=lp,
            amount=amt,
            min_amounts=min_amounts,
        )
        tx_id = await self._send(manifest, f"Remove liquidity from {pool}")
        return self._result(tx_id, "remove_liquidity")

    @operation_tuple
    async def swap_tokens(
        self,
        *,
        pool_address: str,
        from_resource_address: str,
        to_resource_address: str,
        amount_in: str | int | Decimal,
        min_amount_out: str | Decimal | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        self._require_exchange("swap_tokens")
        pool = self._address(pool_address, POOL_KINDS, "pool_address")
        from_res = self._address(
            from_resource_address, AddressKind.RESOURCE, "from_resource_address"
        )
        to_res = self._address(
            to_resource_address,
            AddressKind.RESOURCE,
            "to_resource_address",
        )
        amt = parse_amount(amount_in, field="amount_in")
        manifest = swap_manifest(
            account=account,
            pool_address=pool,
            from_resource_address=from_res,
            to_resource_address=to_res,
            amount_in=amt,
            min_amount_out=min_amount_out,
        )
        tx_id = await self._send(manifest, f"Swap {amt} via {pool}")
        return self._result(tx_id, "swap_tokens")

    @operation_tuple
    async def flash_loan(
        self,
        *,
        pool_address: str,
        resource_address: str,
        amount: str | int | Decimal,
        callback_component_address: str,
        callback_data: str = "",
    ) -> OperationResult:
        account = self._require_wallet()
        self._require_exchange("flash_loan")
        pool = self._address(pool_address, POOL_KINDS, "pool_address")
        resource = self._address(
            resource_address,
            AddressKind.RESOURCE,
            "resource_address",
        )
        callback = self._address(
            callback_component_address,
            AddressKind.COMPONENT,
            "callback_component_address",
        )
        amt = parse_amount(amount)
        info = parse_pool_state(await self._pool_details(pool))
        if info["flash_loans_enabled"] is False:
            raise ValidationError(f"Flash loans are not enabled for pool {pool}")
        manifest = flash_loan_manifest(
            account=account,
            pool_address=pool,
            resource_address=resource,
            amount=amt,
            callback_component_address=callback,
            callback_data=callback_data,
        )
        tx_id = await self._send(manifest, f"Flash loan {amt} from {pool}")
        return self._result(tx_id, "flash_loan")

    @status_tuple
    async def get_pool_info(self, pool_address: str) -> dict[str, Any]:
        pool = self._address(pool_address, POOL_KINDS, "pool_address")
        details = await self._pool_details(pool)
        info = parse_pool_state(details)
        return {
            "pool_address": pool,
            "blueprint": details.get("blueprint_name"),
            **info,
        }
