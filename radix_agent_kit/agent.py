from __future__ import annotations

from typing import Any

from loguru import logger

from radix_agent_kit.adapters.component_adapter.adapter import ComponentAdapter
from radix_agent_kit.adapters.defi_adapter.adapter import DeFiAdapter
from radix_agent_kit.adapters.token_adapter.adapter import TokenAdapter
from radix_agent_kit.core.adapters.decorators import retry_operation
from radix_agent_kit.core.adapters.models import (
    ADD_LIQUIDITY,
    CALL_METHOD,
    CLAIM,
    CREATE_FUNGIBLE,
    CREATE_NON_FUNGIBLE,
    CREATE_POOL,
    FLASH_LOAN,
    MINT_FUNGIBLE,
    MINT_NON_FUNGIBLE,
    REMOVE_LIQUIDITY,
    STAKE,
    SWAP,
    TRANSFER,
    UNSTAKE,
    OperationRequest,
    OperationResult,
)
from radix_agent_kit.core.clients.GatewayClient import GatewayClient
from radix_agent_kit.core.constants.base import (
    OPERATION_MAX_ATTEMPTS,
    OPERATION_RETRY_BASE_DELAY_S,
)
from radix_agent_kit.core.constants.networks import NetworkConfig, resolve_network
from radix_agent_kit.core.wallet import Ed25519Wallet, RadixWallet


class RadixAgentKit:
    """Wires one wallet, gateway and network into the three operation services."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        wallet: RadixWallet | None = None,
        network: NetworkConfig | str | int | None = None,
        gateway: GatewayClient | None = None,
    ):
        self.config = config or {}
        self.logger = logger.bind(adapter=self.__class__.__name__)
        if isinstance(network, NetworkConfig):
            self.network = network
        else:
            self.network = resolve_network(network)
        self.gateway = gateway or GatewayClient(self.network)
        self.wallet = wallet if wallet is not None else Ed25519Wallet.from_config()
        self.retry_max_attempts = int(
            self.config.get("retry_max_attempts", OPERATION_MAX_ATTEMPTS)
        )
        self.retry_base_delay_s = float(
            self.config.get("retry_base_delay_s", OPERATION_RETRY_BASE_DELAY_S)
        )

        services = {
            "wallet": self.wallet,
            "gateway": self.gateway,
            "network": self.network,
        }
        self.tokens = TokenAdapter(self.config, **services)
        self.defi = DeFiAdapter(self.config, **services)
        self.components = ComponentAdapter(self.config, **services)

    async def close(self) -> None:
        await self.gateway.close()

    @retry_operation
    async def execute(
        self, request: OperationRequest
    ) -> tuple[bool, OperationResult | str]:
        """Run one operation request against the matching service."""
        match request:
            case TRANSFER():
                return await self.tokens.transfer_tokens(
                    to_account=request.to_account,
                    amount=request.amount,
                    resource_address=request.resource_address,
                )
            case STAKE():
                return await self.defi.stake_xrd(
                    validator_address=request.validator_address, amount=request.amount
                )
            case UNSTAKE():
                return await self.defi.unstake_xrd(
                    validator_address=request.validator_address, amount=request.amount
                )
            case CLAIM():
                return await self.defi.claim_xrd(
                    validator_address=request.validator_address
                )
            case CREATE_POOL():
                return await self.defi.create_pool(
                    resource_address_1=request.resource_address_1,
                    resource_address_2=request.resource_address_2,
                    amount_1=request.amount_1,
                    amount_2=request.amount_2,
                    variant=request.variant,
                    fee_tier=request.fee_tier,
                    asset_ratio=request.asset_ratio,
                    hook_address=request.hook_address,
                )
            case ADD_LIQUIDITY():
                return await self.defi.add_liquidity(
                    pool_address=request.pool_address,
                    amount_1=request.amount_1,
                    amount_2=request.amount_2,
                )
            case REMOVE_LIQUIDITY():
                return await self.defi.remove_liquidity(
                    pool_address=request.pool_address,
                    amount_lp=request.amount_lp,
                    min_amount_1=request.min_amount_1,
                    min_amount_2=request.min_amount_2,
                )
            case SWAP():
                return await self.defi.swap_tokens(
                    pool_address=request.pool_address,
                    from_resource_address=request.from_resource_address,
                    to_resource_address=request.to_resource_address,
                    amount_in=request.amount_in,
                    min_amount_out=request.min_amount_out,
                )
            case FLASH_LOAN():
                return await self.defi.flash_loan(
                    pool_address=request.pool_address,
                    resource_address=request.resource_address,
                    amount=request.amount,
                    callback_component_address=request.callback_component_address,
                    callback_data=request.callback_data,
                )
            case CREATE_FUNGIBLE():
                return await self.tokens.create_fungible_resource(
                    name=request.name,
                    symbol=request.symbol,
                    initial_supply=request.initial_supply,
                    divisibility=request.divisibility,
                    description=request.description,
                    icon_url=request.icon_url,
                    metadata=request.metadata,
                )
            case CREATE_NON_FUNGIBLE():
                return await self.tokens.create_non_fungible_resource(
                    name=request.name,
                    description=request.description,
                    icon_url=request.icon_url,
                    id_type=request.id_type,
                    metadata=request.metadata,
                )
            case MINT_FUNGIBLE():
                return await self.tokens.mint_fungible(
                    resource_address=request.resource_address,
                    amount=request.amount,
                    to_account=request.to_account,
                    badge_address=request.badge_address,
                )
            case MINT_NON_FUNGIBLE():
                return await self.tokens.mint_non_fungible(
                    resource_address=request.resource_address,
                    nft_data=request.nft_data,
                    nft_id=request.nft_id,
                    to_account=request.to_account,
                    badge_address=request.badge_address,
                )
            case CALL_METHOD():
                return await self.components.call_component_method(
                    component_address=request.component_address,
                    method_name=request.method_name,
                    args=request.args,
                )
        raise ValueError(f"Unsupported operation request: {type(request).__name__}")
