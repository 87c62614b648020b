from __future__ import annotations

import re
import time
from decimal import Decimal
from typing import Any

import httpx
from loguru import logger

from radix_agent_kit.core.constants.base import DEFAULT_HTTP_TIMEOUT
from radix_agent_kit.core.constants.networks import NetworkConfig

_HEX = re.compile(r"^[0-9a-fA-F]+$")


class GatewayClient:
    """Async client for the Radix Babylon Gateway API.

    Every endpoint is a JSON POST. HTTP errors surface as
    ``httpx.HTTPStatusError``; callers decide how to classify them.
    """

    def __init__(
        self,
        network: NetworkConfig,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.network = network
        self.base_url = network.gateway_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.headers = {
            "Content-Type": "application/json",
        }

    async def _request(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug(f"Making POST request to {url}")
        start_time = time.time()

        resp = await self.client.post(url, json=payload, headers=self.headers)

        elapsed = time.time() - start_time
        if resp.status_code >= 400:
            logger.warning(
                f"HTTP {resp.status_code} response for POST {url} after {elapsed:.2f}s"
            )
        else:
            logger.debug(
                f"HTTP {resp.status_code} response for POST {url} after {elapsed:.2f}s"
            )

        resp.raise_for_status()
        return resp.json()

    async def close(self) -> None:
        await self.client.aclose()

    async def get_gateway_status(self) -> dict[str, Any]:
        return await self._request("/status/gateway-status", {})

    async def get_current_epoch(self) -> int:
        status = await self.get_gateway_status()
        try:
            return int(status["ledger_state"]["epoch"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Gateway status has no ledger epoch: {status}") from exc

    async def submit_transaction(
        self, notarized_transaction_hex: str
    ) -> dict[str, Any]:
        if not notarized_transaction_hex or not _HEX.match(notarized_transaction_hex):
            raise ValueError("notarized transaction payload must be non-empty hex")
        return await self._request(
            "/transaction/submit",
            {"notarized_transaction_hex": notarized_transaction_hex},
        )

    async def get_transaction_status(self, intent_hash: str) -> dict[str, Any]:
        if not intent_hash:
            raise ValueError("intent_hash is required")
        return await self._request("/transaction/status", {"intent_hash": intent_hash})

    async def get_transaction_details(self, intent_hash: str) -> dict[str, Any]:
        if not intent_hash:
            raise ValueError("intent_hash is required")
        return await self._request(
            "/transaction/committed-details",
            {
                "intent_hash": intent_hash,
                "opt_ins": {"receipt_state_changes": True, "receipt_events": False},
            },
        )

    async def get_entity_details(
        self,
        addresses: str | list[str],
        *,
        opt_ins: dict[str, Any] | None = None,
        aggregation_level: str | None = None,
    ) -> dict[str, Any]:
        if isinstance(addresses, str):
            addresses = [addresses]
        if not addresses:
            raise ValueError("at least one address is required")
        payload: dict[str, Any] = {"addresses": addresses}
        if opt_ins:
            payload["opt_ins"] = opt_ins
        if aggregation_level:
            payload["aggregation_level"] = aggregation_level
        return await self._request("/state/entity/details", payload)

    async def get_entity_item(self, address: str, **kwargs: Any) -> dict[str, Any]:
        """Details for a single entity, or ``{}`` when the gateway knows nothing."""
        details = await self.get_entity_details(address, **kwargs)
        items = details.get("items") or []
        return items[0] if items else {}

    async def get_account_balances(self, account_address: str) -> dict[str, Any]:
        return await self.get_entity_item(
            account_address,
            opt_ins={
                "non_fungible_include_nfids": True,
                "explicit_metadata": ["name", "symbol", "description"],
            },
            aggregation_level="Vault",
        )


def metadata_dict(entity: dict[str, Any], *, field: str = "metadata") -> dict[str, Any]:
    """Flatten gateway metadata items into ``{key: value}``."""
    out: dict[str, Any] = {}
    for item in (entity.get(field) or {}).get("items") or []:
        typed = (item.get("value") or {}).get("typed") or {}
        value = typed.get("value", typed.get("values"))
        out[str(item.get("key"))] = value
    return out


def fungible_balances(account: dict[str, Any]) -> dict[str, Decimal]:
    balances: dict[str, Decimal] = {}
    for resource in (account.get("fungible_resources") or {}).get("items") or []:
        address = resource.get("resource_address")
        if not address:
            continue
        vaults = (resource.get("vaults") or {}).get("items") or []
        if vaults:
            total = sum(
                (Decimal(str(v.get("amount") or "0")) for v in vaults), Decimal(0)
            )
        else:
            total = Decimal(str(resource.get("amount") or "0"))
        balances[address] = balances.get(address, Decimal(0)) + total
    return balances


def non_fungible_holdings(account: dict[str, Any]) -> list[dict[str, Any]]:
    """One entry per non-fungible resource: address, ids, count, metadata."""
    holdings: list[dict[str, Any]] = []
    for resource in (account.get("non_fungible_resources") or {}).get("items") or []:
        address = resource.get("resource_address")
        if not address:
            continue
        ids: list[str] = []
        count = 0
        for vault in (resource.get("vaults") or {}).get("items") or []:
            ids.extend(str(i) for i in vault.get("items") or [])
            count += int(vault.get("total_count") or 0)
        holdings.append(
            {
                "resource_address": address,
                "ids": ids,
                "count": max(count, len(ids)),
                "metadata": metadata_dict(resource, field="explicit_metadata"),
            }
        )
    return holdings
