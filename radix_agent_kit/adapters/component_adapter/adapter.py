from __future__ import annotations

from typing import Any

from radix_agent_kit.core.adapters.BaseAdapter import BaseAdapter
from radix_agent_kit.core.adapters.decorators import operation_tuple, status_tuple
from radix_agent_kit.core.adapters.models import OperationResult
from radix_agent_kit.core.clients.GatewayClient import GatewayClient, metadata_dict
from radix_agent_kit.core.constants.base import ADAPTER_COMPONENT
from radix_agent_kit.core.constants.networks import NetworkConfig
from radix_agent_kit.core.manifest.templates import call_method_manifest
from radix_agent_kit.core.utils.addresses import AddressKind
from radix_agent_kit.core.wallet import RadixWallet

COMPONENT_KINDS = (AddressKind.COMPONENT, AddressKind.POOL, AddressKind.ACCOUNT)


class ComponentAdapter(BaseAdapter):
    adapter_type = ADAPTER_COMPONENT

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        wallet: RadixWallet | None = None,
        gateway: GatewayClient | None = None,
        network: NetworkConfig | None = None,
    ) -> None:
        super().__init__(
            "component_adapter", config, wallet=wallet, gateway=gateway, network=network
        )

    @operation_tuple
    async def call_component_method(
        self,
        *,
        component_address: str,
        method_name: str,
        args: list[Any] | None = None,
    ) -> OperationResult:
        """Call any method; ``args`` are rendered with the manifest formatter."""
        account = self._require_wallet()
        component = self._address(
            component_address,
            COMPONENT_KINDS,
            "component_address",
        )
        manifest = call_method_manifest(
            account=account,
            component_address=component,
            method_name=method_name,
            args=args,
        )
        tx_id = await self._send(manifest, f"Call {method_name} on {component}")
        return self._result(tx_id, "call_component_method")

    @status_tuple
    async def get_component_state(self, component_address: str) -> dict[str, Any]:
        component = self._address(
            component_address,
            COMPONENT_KINDS,
            "component_address",
        )
        item = await self.gateway.get_entity_item(component)
        if not item:
            raise ValueError(f"Component not found: {component}")
        details = item.get("details") or {}
        return {
            "component_address": component,
            "blueprint": details.get("blueprint_name"),
            "package_address": details.get("package_address"),
            "state": details.get("state"),
            "metadata": metadata_dict(item),
        }
