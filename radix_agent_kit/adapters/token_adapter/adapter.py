from __future__ import annotations

from decimal import Decimal
from typing import Any

from radix_agent_kit.core.adapters.BaseAdapter import BaseAdapter
from radix_agent_kit.core.adapters.decorators import operation_tuple, status_tuple
from radix_agent_kit.core.adapters.models import OperationResult
from radix_agent_kit.core.clients.GatewayClient import (
    GatewayClient,
    fungible_balances,
    metadata_dict,
    non_fungible_holdings,
)
from radix_agent_kit.core.constants.base import (
    ADAPTER_TOKEN,
    DEFAULT_DIVISIBILITY,
    MIN_XRD_FOR_CREATION,
)
from radix_agent_kit.core.constants.networks import NetworkConfig
from radix_agent_kit.core.errors import NetworkUnsupportedError, ValidationError
from radix_agent_kit.core.manifest.templates import (
    create_fungible_manifest,
    create_non_fungible_manifest,
    faucet_manifest,
    mint_fungible_manifest,
    mint_non_fungible_manifest,
    transfer_manifest,
)
from radix_agent_kit.core.utils.addresses import AddressKind
from radix_agent_kit.core.utils.polling import EntityType
from radix_agent_kit.core.utils.units import parse_amount
from radix_agent_kit.core.wallet import RadixWallet


class TokenAdapter(BaseAdapter):
    adapter_type = ADAPTER_TOKEN

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        wallet: RadixWallet | None = None,
        gateway: GatewayClient | None = None,
        network: NetworkConfig | None = None,
    ) -> None:
        super().__init__(
            "token_adapter", config, wallet=wallet, gateway=gateway, network=network
        )

    async def _xrd_balance(self, account: str) -> Decimal:
        balances = fungible_balances(await self.gateway.get_account_balances(account))
        return balances.get(self.network.xrd_address, Decimal(0))

    async def can_create_tokens(self, account: str | None = None) -> bool:
        """True when ``account`` holds enough XRD to pay for a resource creation."""
        account = account or self._require_wallet()
        balance = await self._xrd_balance(account)
        return balance >= MIN_XRD_FOR_CREATION

    async def _ensure_creation_funds(self, account: str) -> None:
        if not await self.can_create_tokens(account):
            raise ValidationError(
                f"Insufficient XRD to create a resource: need at least "
                f"{MIN_XRD_FOR_CREATION} XRD on {account}"
            )

    @operation_tuple
    async def create_fungible_resource(
        self,
        *,
        name: str,
        symbol: str,
        initial_supply: str | int | Decimal,
        divisibility: int = DEFAULT_DIVISIBILITY,
        description: str | None = None,
        icon_url: str | None = None,
        metadata: dict[str, Any] | None = None,
        minter_badge_address: str | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        if minter_badge_address:
            self._address(
                minter_badge_address,
                AddressKind.RESOURCE,
                "minter_badge_address",
            )
        manifest = create_fungible_manifest(
            owner_account=account,
            name=name,
            symbol=symbol,
            initial_supply=initial_supply,
            divisibility=divisibility,
            description=description,
            icon_url=icon_url,
            metadata=metadata,
            minter_badge_address=minter_badge_address,
        )
        await self._ensure_creation_funds(account)
        tx_id = await self._send(manifest, f"Create fungible token {symbol}")
        return await self._extract(
            tx_id, EntityType.GLOBAL_FUNGIBLE_RESOURCE, "create_fungible_resource"
        )

    @operation_tuple
    async def create_non_fungible_resource(
        self,
        *,
        name: str,
        description: str | None = None,
        icon_url: str | None = None,
        id_type: str = "Integer",
        metadata: dict[str, Any] | None = None,
        minter_badge_address: str | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        if minter_badge_address:
            self._address(
                minter_badge_address,
                AddressKind.RESOURCE,
                "minter_badge_address",
            )
        manifest = create_non_fungible_manifest(
            owner_account=account,
            name=name,
            description=description,
            icon_url=icon_url,
            id_type=id_type,
            metadata=metadata,
            minter_badge_address=minter_badge_address,
        )
        await self._ensure_creation_funds(account)
        tx_id = await self._send(manifest, f"Create NFT collection {name}")
        return await self._extract(
            tx_id,
            EntityType.GLOBAL_NON_FUNGIBLE_RESOURCE,
            "create_non_fungible_resource",
        )

    @operation_tuple
    async def transfer_tokens(
        self,
        *,
        to_account: str,
        amount: str | int | Decimal,
        resource_address: str | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        to_account = self._address(to_account, AddressKind.ACCOUNT, "to_account")
        resource = self._address(
            resource_address or self.network.xrd_address,
            AddressKind.RESOURCE,
            "resource_address",
        )
        amt = parse_amount(amount)
        manifest = transfer_manifest(
            from_account=account,
            to_account=to_account,
            resource_address=resource,
            amount=amt,
        )
        tx_id = await self._send(manifest, f"Transfer {amt} to {to_account}")
        return self._result(tx_id, "transfer_tokens")

    @operation_tuple
    async def mint_fungible(
        self,
        *,
        resource_address: str,
        amount: str | int | Decimal,
        to_account: str | None = None,
        badge_address: str | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        resource = self._address(
            resource_address,
            AddressKind.RESOURCE,
            "resource_address",
        )
        if to_account:
            to_account = self._address(to_account, AddressKind.ACCOUNT, "to_account")
        if badge_address:
            badge_address = self._address(
                badge_address,
                AddressKind.RESOURCE,
                "badge_address",
            )
        amt = parse_amount(amount)
        manifest = mint_fungible_manifest(
            account=account,
            resource_address=resource,
            amount=amt,
            to_account=to_account,
            badge_address=badge_address,
        )
        tx_id = await self._send(manifest, f"Mint {amt} of {resource}")
        return self._result(tx_id, "mint_fungible")

    @operation_tuple
    async def mint_non_fungible(
        self,
        *,
        resource_address: str,
        nft_data: dict[str, Any] | None = None,
        nft_id: int | str | None = None,
        to_account: str | None = None,
        badge_address: str | None = None,
    ) -> OperationResult:
        account = self._require_wallet()
        resource = self._address(
            resource_address,
            AddressKind.RESOURCE,
            "resource_address",
        )
        if to_account:
            to_account = self._address(to_account, AddressKind.ACCOUNT, "to_account")
        if badge_address:
            badge_address = self._address(
                badge_address,
                AddressKind.RESOURCE,
                "badge_address",
            )
        if nft_id is None:
            nft_id = await self._next_integer_id(account, resource)
        manifest = mint_non_fungible_manifest(
            account=account,
            resource_address=resource,
            nft_id=nft_id,
            data=nft_data,
            to_account=to_account,
            badge_address=badge_address,
        )
        tx_id = await self._send(manifest, f"Mint NFT {nft_id} of {resource}")
        return self._result(tx_id, "mint_non_fungible")

    async def _next_integer_id(self, account: str, resource: str) -> int:
        """One past the highest integer id of ``resource`` held by ``account``."""
        highest = 0
        balances = await self.gateway.get_account_balances(account)
        holdings = non_fungible_holdings(balances)
        for holding in holdings:
            if holding["resource_address"] != resource:
                continue
            for local_id in holding["ids"]:
                text = local_id.strip("#")
                if text.isdigit():
                    highest = max(highest, int(text))
        return highest + 1

    @operation_tuple
    async def fund_from_faucet(self) -> OperationResult:
        account = self._require_wallet()
        if not self.network.is_test_network or not self.network.faucet_address:
            raise NetworkUnsupportedError("fund_from_faucet", self.network.name)
        manifest = faucet_manifest(
            account=account, faucet_address=self.network.faucet_address
        )
        tx_id = await self._send(manifest, "Faucet funding")
        return self._result(tx_id, "fund_from_faucet")

    @status_tuple
    async def get_token_info(self, resource_address: str) -> dict[str, Any]:
        resource = self._address(
            resource_address,
            AddressKind.RESOURCE,
            "resource_address",
        )
        item = await self.gateway.get_entity_item(resource)
        if not item:
            raise ValueError(f"Resource not found: {resource}")
        details = item.get("details") or {}
        return {
            "resource_address": resource,
            "type": details.get("type"),
            "divisibility": details.get("divisibility"),
            "total_supply": details.get("total_supply"),
            "metadata": metadata_dict(item),
        }

    @status_tuple
    async def get_balances(self, account: str | None = None) -> dict[str, Any]:
        account = account or self._require_wallet()
        account = self._address(account, AddressKind.ACCOUNT, "account")
        item = await self.gateway.get_account_balances(account)
        return {
            "account": account,
            "fungible": {k: str(v) for k, v in fungible_balances(item).items()},
            "non_fungible": non_fungible_holdings(item),
        }

    @status_tuple
    async def get_account_info(self, account: str | None = None) -> dict[str, Any]:
        account = account or self._require_wallet()
        account = self._address(account, AddressKind.ACCOUNT, "account")
        item = await self.gateway.get_entity_item(account)
        if not item:
            raise ValueError(f"Account not found: {account}")
        details = item.get("details") or {}
        state = details.get("state")
        return {
            "account": account,
            "type": details.get("type"),
            "public_key": state.get("public_key") if isinstance(state, dict) else None,
            "metadata": metadata_dict(item),
        }

    @status_tuple
    async def get_current_epoch(self) -> int:
        return await self.gateway.get_current_epoch()
