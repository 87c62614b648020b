from __future__ import annotations

import pytest

import radix_agent_kit.core.config as config
from radix_agent_kit.core.constants.networks import (
    NETWORKS,
    ExchangeConfig,
    resolve_network,
)


@pytest.mark.parametrize(
    "network,expected",
    [
        ("mainnet", 1),
        ("Stokenet", 2),
        (" localnet ", 240),
        (1, 1),
        (2, 2),
        (240, 240),
    ],
)
def test_resolve_by_name_or_id(network, expected):
    assert resolve_network(network).network_id == expected


def test_resolve_uses_configured_network():
    config.set_config({"network": "mainnet"})
    assert resolve_network().name == "mainnet"


@pytest.mark.parametrize("network", ["devnet", 99, ""])
def test_unknown_network(network):
    with pytest.raises(ValueError):
        resolve_network(network)


def test_hrp_suffixes():
    assert NETWORKS["mainnet"].hrp_suffix == "rdx1"
    assert NETWORKS["stokenet"].hrp_suffix == "tdx_2_1"
    assert NETWORKS["localnet"].hrp_suffix == "sim1"
    for cfg in NETWORKS.values():
        assert cfg.xrd_address.startswith(f"resource_{cfg.hrp_suffix}")


def test_network_flags():
    assert NETWORKS["mainnet"].is_test_network is False
    assert NETWORKS["stokenet"].is_test_network is True
    assert NETWORKS["stokenet"].supports_exchange is True
    assert NETWORKS["localnet"].supports_exchange is False
    assert NETWORKS["mainnet"].faucet_address is None


def test_overrides_are_merged():
    config.set_config(
        {
            "networks": {
                "stokenet": {
                    "gateway_url": "https://gw.example/",
                    "exchange": {
                        "package_address": "package_tdx_2_1custom",
                        "blueprints": {"hooked": "HookedPool"},
                    },
                },
                "mainnet": {
                    "exchange": {"factory_addresses": {"standard": "component_rdx1f"}}
                },
            }
        }
    )

    stokenet = resolve_network("stokenet")
    assert stokenet.gateway_url == "https://gw.example"
    assert stokenet.exchange.package_address == "package_tdx_2_1custom"
    assert stokenet.exchange.blueprints["hooked"] == "HookedPool"
    assert stokenet.exchange.blueprints["standard"] == "BasicPool"
    assert stokenet.exchange.is_configured("standard") is True

    mainnet = resolve_network("mainnet")
    assert mainnet.exchange.is_configured("standard") is True
    assert mainnet.exchange.is_configured("imbalanced") is False

    assert NETWORKS["stokenet"].gateway_url == "https://stokenet.radixdlt.com"


def test_resolve_without_overrides_returns_builtin():
    assert resolve_network("localnet") is NETWORKS["localnet"]


def test_exchange_not_configured_without_package():
    assert ExchangeConfig(mode="package").is_configured("standard") is False
    assert ExchangeConfig(mode="factory").is_configured("standard") is False
