import json
from decimal import Decimal

import httpx
import pytest

from radix_agent_kit.core.clients.GatewayClient import (
    GatewayClient,
    fungible_balances,
    metadata_dict,
    non_fungible_holdings,
)
from radix_agent_kit.tests.test_utils import (
    ACCOUNT_A,
    CLAIM_NFT,
    RESOURCE_1,
    STOKENET,
    TX_ID,
    XRD,
    account_with_balances,
    non_fungible_resource,
)


def _client(handler) -> GatewayClient:
    transport = httpx.MockTransport(handler)
    return GatewayClient(STOKENET, client=httpx.AsyncClient(transport=transport))


@pytest.mark.asyncio
class TestGatewayRequests:
    async def test_current_epoch(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"ledger_state": {"epoch": 321}})

        client = _client(handler)
        assert await client.get_current_epoch() == 321
        assert seen == ["/status/gateway-status"]
        await client.close()

    async def test_current_epoch_missing(self):
        client = _client(lambda request: httpx.Response(200, json={}))
        with pytest.raises(ValueError):
            await client.get_current_epoch()

    async def test_submit_posts_hex_payload(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            assert request.url == "https://stokenet.radixdlt.com/transaction/submit"
            return httpx.Response(200, json={"duplicate": False})

        client = _client(handler)
        assert await client.submit_transaction("deadbeef") == {"duplicate": False}
        assert bodies == [{"notarized_transaction_hex": "deadbeef"}]

    async def test_submit_rejects_non_hex(self):
        client = _client(lambda request: httpx.Response(200, json={}))
        with pytest.raises(ValueError):
            await client.submit_transaction("not-hex")

    async def test_http_errors_raise(self):
        client = _client(lambda request: httpx.Response(503, json={"message": "busy"}))
        with pytest.raises(httpx.HTTPStatusError):
            await client.get_transaction_status(TX_ID)

    async def test_committed_details_opts_into_state_changes(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"transaction": {}})

        client = _client(handler)
        await client.get_transaction_details(TX_ID)
        assert bodies[0]["intent_hash"] == TX_ID
        assert bodies[0]["opt_ins"]["receipt_state_changes"] is True

    async def test_entity_item_returns_first_or_empty(self):
        responses = iter(
            [
                httpx.Response(200, json={"items": [{"address": RESOURCE_1}]}),
                httpx.Response(200, json={"items": []}),
            ]
        )
        client = _client(lambda request: next(responses))
        assert await client.get_entity_item(RESOURCE_1) == {"address": RESOURCE_1}
        assert await client.get_entity_item(RESOURCE_1) == {}

    async def test_entity_details_batches_addresses(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"items": []})

        client = _client(handler)
        await client.get_entity_details([ACCOUNT_A, RESOURCE_1])
        assert bodies == [{"addresses": [ACCOUNT_A, RESOURCE_1]}]

        with pytest.raises(ValueError):
            await client.get_entity_details([])

    async def test_account_balances_request_vault_aggregation(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"items": [{"address": ACCOUNT_A}]})

        client = _client(handler)
        await client.get_account_balances(ACCOUNT_A)
        assert bodies[0]["addresses"] == [ACCOUNT_A]
        assert bodies[0]["aggregation_level"] == "Vault"
        assert bodies[0]["opt_ins"]["non_fungible_include_nfids"] is True


class TestResponseHelpers:
    def test_fungible_balances_sum_vaults(self):
        account = account_with_balances({XRD: "12.5"})
        account["fungible_resources"]["items"][0]["vaults"]["items"].append(
            {"amount": "0.5"}
        )
        assert fungible_balances(account) == {XRD: Decimal("13")}

    def test_fungible_balances_global_aggregation(self):
        account = {
            "fungible_resources": {
                "items": [{"resource_address": XRD, "amount": "7"}]
            }
        }
        assert fungible_balances(account) == {XRD: Decimal("7")}

    def test_non_fungible_holdings(self):
        account = account_with_balances(
            non_fungible=[
                non_fungible_resource(
                    CLAIM_NFT, ["#1#", "#2#"], {"name": "Stake Claim"}
                )
            ]
        )
        assert non_fungible_holdings(account) == [
            {
                "resource_address": CLAIM_NFT,
                "ids": ["#1#", "#2#"],
                "count": 2,
                "metadata": {"name": "Stake Claim"},
            }
        ]

    def test_metadata_dict(self):
        entity = {
            "metadata": {
                "items": [
                    {"key": "symbol", "value": {"typed": {"value": "LTC"}}},
                    {"key": "tags", "value": {"typed": {"values": ["a", "b"]}}},
                ]
            }
        }
        assert metadata_dict(entity) == {"symbol": "LTC", "tags": ["a", "b"]}
