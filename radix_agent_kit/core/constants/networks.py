from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from radix_agent_kit.core.config import (
    get_gateway_url,
    get_network_name,
    get_network_overrides,
)

NETWORK_MAINNET = "mainnet"
NETWORK_STOKENET = "stokenet"
NETWORK_LOCALNET = "localnet"

NETWORK_ID_MAINNET = 1
NETWORK_ID_STOKENET = 2
NETWORK_ID_LOCALNET = 240

POOL_VARIANTS = ("standard", "imbalanced", "hooked")


@dataclass(frozen=True)
class ExchangeConfig:
    """Deployment of the pool exchange on one network.

    ``mode`` is ``"package"`` when pools are instantiated directly from the
    blueprint package, ``"factory"`` when a factory component creates them.
    """

    mode: str
    package_address: str | None = None
    factory_addresses: dict[str, str] = field(default_factory=dict)
    blueprints: dict[str, str] = field(
        default_factory=lambda: {
            "standard": "BasicPool",
            "imbalanced": "FlexPool",
            "hooked": "PrecisionPool",
        }
    )

    def is_configured(self, variant: str) -> bool:
        if self.mode == "package":
            return bool(self.package_address) and variant in self.blueprints
        return bool(self.factory_addresses.get(variant))


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    network_id: int
    hrp_suffix: str
    gateway_url: str
    xrd_address: str
    resource_package_address: str
    faucet_address: str | None = None
    exchange: ExchangeConfig | None = None

    @property
    def supports_exchange(self) -> bool:
        return self.exchange is not None

    @property
    def is_test_network(self) -> bool:
        return self.network_id != NETWORK_ID_MAINNET


# Well-known native addresses per network.
# https://docs.radixdlt.com/docs/well-known-addresses
#
# Exchange component/package addresses are deployment specific and are
# supplied through config (networks.<name>.exchange).
NETWORKS: dict[str, NetworkConfig] = {
    NETWORK_MAINNET: NetworkConfig(
        name=NETWORK_MAINNET,
        network_id=NETWORK_ID_MAINNET,
        hrp_suffix="rdx1",
        gateway_url="https://mainnet.radixdlt.com",
        xrd_address="resource_rdx1tknxxxxxxxxxradxrdxxxxxxxxx009923554798xxxxxxxxxradxrd",
        resource_package_address="package_rdx1pkgxxxxxxxxxresrcexxxxxxxxx000538436477xxxxxxxxxaj0zg9",
        exchange=ExchangeConfig(mode="factory"),
    ),
    NETWORK_STOKENET: NetworkConfig(
        name=NETWORK_STOKENET,
        network_id=NETWORK_ID_STOKENET,
        hrp_suffix="tdx_2_1",
        gateway_url="https://stokenet.radixdlt.com",
        xrd_address="resource_tdx_2_1tknxxxxxxxxxradxrdxxxxxxxxx009923554798xxxxxxxxxtfd2jc",
        resource_package_address="package_tdx_2_1pkgxxxxxxxxxresrcexxxxxxxxx000538436477xxxxxxxxxaj0zg9",
        faucet_address="component_tdx_2_1cptxxxxxxxxxfaucetxxxxxxxxx000527798379xxxxxxxxxyulkzl",
        exchange=ExchangeConfig(mode="package"),
    ),
    NETWORK_LOCALNET: NetworkConfig(
        name=NETWORK_LOCALNET,
        network_id=NETWORK_ID_LOCALNET,
        hrp_suffix="sim1",
        gateway_url="http://localhost:5308",
        xrd_address="resource_sim1tknxxxxxxxxxradxrdxxxxxxxxx009923554798xxxxxxxxxakj8n3",
        resource_package_address="package_sim1pkgxxxxxxxxxresrcexxxxxxxxx000538436477xxxxxxxxxaj0zg9",
        faucet_address="component_sim1cptxxxxxxxxxfaucetxxxxxxxxx000527798379xxxxxxxxxhkrefh",
    ),
}

_NETWORK_IDS: dict[int, str] = {cfg.network_id: name for name, cfg in NETWORKS.items()}


def _apply_exchange_overrides(
    exchange: ExchangeConfig | None, overrides: dict[str, Any]
) -> ExchangeConfig | None:
    if exchange is None or not overrides:
        return exchange
    changes: dict[str, Any] = {}
    if overrides.get("package_address"):
        changes["package_address"] = str(overrides["package_address"])
    if isinstance(overrides.get("factory_addresses"), dict):
        changes["factory_addresses"] = {
            **exchange.factory_addresses,
            **overrides["factory_addresses"],
        }
    if isinstance(overrides.get("blueprints"), dict):
        changes["blueprints"] = {**exchange.blueprints, **overrides["blueprints"]}
    return dataclasses.replace(exchange, **changes)


def resolve_network(network: str | int | None = None) -> NetworkConfig:
    """Look up a network by name or id and merge config overrides into it.

    The returned config is immutable; resolve once when a service is built.
    """
    if network is None:
        network = get_network_name()
    if isinstance(network, int):
        name = _NETWORK_IDS.get(network)
    else:
        name = str(network).strip().lower()
    base = NETWORKS.get(name or "")
    if base is None:
        raise ValueError(f"Unsupported Radix network={network}")

    overrides = get_network_overrides(base.name)
    changes: dict[str, Any] = {}
    for key in ("xrd_address", "resource_package_address", "faucet_address"):
        if overrides.get(key):
            changes[key] = str(overrides[key])
    gateway_url = get_gateway_url(base.name)
    if gateway_url:
        changes["gateway_url"] = gateway_url
    exchange = _apply_exchange_overrides(base.exchange, overrides.get("exchange") or {})
    if exchange is not base.exchange:
        changes["exchange"] = exchange
    return dataclasses.replace(base, **changes) if changes else base
