from __future__ import annotations

from abc import ABC
from typing import Any

from loguru import logger

from radix_agent_kit.core.adapters.models import OperationResult
from radix_agent_kit.core.clients.GatewayClient import GatewayClient
from radix_agent_kit.core.config import get_duplicate_policy, get_polling_settings
from radix_agent_kit.core.constants.base import (
    DUPLICATE_POLICIES,
    DUPLICATE_POLICY_POLL,
)
from radix_agent_kit.core.constants.networks import NetworkConfig, resolve_network
from radix_agent_kit.core.errors import (
    DuplicateTransactionError,
    ExtractionNotFound,
    ExtractionTimeout,
    NetworkUnsupportedError,
    ValidationError,
)
from radix_agent_kit.core.manifest.instructions import Manifest
from radix_agent_kit.core.utils.addresses import AddressKind, validate_address
from radix_agent_kit.core.utils.polling import EntityType, extract_created_entity
from radix_agent_kit.core.utils.transaction import send_manifest
from radix_agent_kit.core.wallet import RadixWallet


class BaseAdapter(ABC):
    """Shared plumbing for Radix operation services.

    Subclasses turn validated parameters into a ``Manifest`` and hand it to
    ``_send``; creation operations then call ``_extract`` for the new address.
    """

    adapter_type: str | None = None

    def __init__(
        self,
        name: str,
        config: dict[str, Any] | None = None,
        *,
        wallet: RadixWallet | None = None,
        gateway: GatewayClient | None = None,
        network: NetworkConfig | None = None,
    ):
        self.name = name
        self.config = config or {}
        self.logger = logger.bind(adapter=self.__class__.__name__)
        self.network = network or (gateway.network if gateway else resolve_network())
        self.gateway = gateway or GatewayClient(self.network)
        self.wallet = wallet

        default_attempts, default_interval = get_polling_settings()
        self.poll_max_attempts = int(
            self.config.get("poll_max_attempts", default_attempts)
        )
        self.poll_interval_s = float(
            self.config.get("poll_interval_s", default_interval)
        )
        self.duplicate_policy = str(
            self.config.get("duplicate_policy") or get_duplicate_policy()
        ).lower()
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ValueError(f"Unknown duplicate_policy '{self.duplicate_policy}'")

    async def close(self) -> None:
        await self.gateway.close()

    def _require_wallet(self) -> str:
        if self.wallet is None:
            raise ValidationError("wallet not configured")
        return self.wallet.get_address()

    def _address(
        self,
        value: str,
        kinds: AddressKind | tuple[AddressKind, ...],
        field: str,
    ) -> str:
        return validate_address(value, network=self.network, kinds=kinds, field=field)

    def _require_exchange(self, operation: str) -> None:
        if not self.network.supports_exchange:
            raise NetworkUnsupportedError(operation, self.network.name)

    async def _send(self, manifest: Manifest, label: str) -> str:
        """Submit ``manifest`` signed by the adapter wallet; return the transaction id."""
        if self.wallet is None:
            raise ValidationError("wallet not configured")
        self.logger.info(f"Submitting {label}")
        try:
            return await send_manifest(
                self.gateway,
                manifest,
                self.wallet,
                network_id=self.network.network_id,
                label=label,
            )
        except DuplicateTransactionError as exc:
            if self.duplicate_policy != DUPLICATE_POLICY_POLL:
                raise
            self.logger.warning(
                f"Gateway reports {exc.intent_hash} as a duplicate; tracking it"
            )
            return exc.intent_hash

    async def _extract(
        self, transaction_id: str, entity_type: EntityType, operation: str
    ) -> OperationResult:
        """Wrap ``transaction_id`` in a result, resolving the created address if possible."""
        try:
            entity = await extract_created_entity(
                self.gateway,
                transaction_id,
                entity_type,
                max_attempts=self.poll_max_attempts,
                poll_interval_s=self.poll_interval_s,
            )
        except ExtractionTimeout as exc:
            self.logger.warning(str(exc))
            return OperationResult(
                transaction_id=transaction_id,
                operation=operation,
                extraction_status="timeout",
            )
        except ExtractionNotFound as exc:
            self.logger.warning(str(exc))
            return OperationResult(
                transaction_id=transaction_id,
                operation=operation,
                extraction_status="not_found",
            )
        return OperationResult(
            transaction_id=transaction_id,
            operation=operation,
            created_address=entity.entity_address,
            extraction_status="found",
        )

    def _result(self, transaction_id: str, operation: str) -> OperationResult:
        return OperationResult(transaction_id=transaction_id, operation=operation)
