from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx
from loguru import logger

from radix_agent_kit.core.clients.GatewayClient import GatewayClient
from radix_agent_kit.core.constants.base import POLL_INTERVAL_S, POLL_MAX_ATTEMPTS
from radix_agent_kit.core.errors import ExtractionNotFound, ExtractionTimeout


class TransactionStatus(StrEnum):
    PENDING = "Pending"
    COMMITTED_SUCCESS = "CommittedSuccess"
    COMMITTED_FAILURE = "CommittedFailure"
    REJECTED = "Rejected"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> TransactionStatus:
        try:
            return cls(str(value))
        except ValueError:
            return cls.UNKNOWN


class EntityType(StrEnum):
    GLOBAL_FUNGIBLE_RESOURCE = "GlobalFungibleResource"
    GLOBAL_NON_FUNGIBLE_RESOURCE = "GlobalNonFungibleResource"
    GLOBAL_GENERIC_COMPONENT = "GlobalGenericComponent"
    GLOBAL_ONE_RESOURCE_POOL = "GlobalOneResourcePool"
    GLOBAL_TWO_RESOURCE_POOL = "GlobalTwoResourcePool"
    GLOBAL_MULTI_RESOURCE_POOL = "GlobalMultiResourcePool"


TERMINAL_FAILURES = (TransactionStatus.COMMITTED_FAILURE, TransactionStatus.REJECTED)


@dataclass(frozen=True)
class CreatedEntity:
    entity_address: str
    entity_type: str


# intent_status values that settle the outcome; the rest stay non-terminal.
_INTENT_STATUSES = {
    "PermanentlyRejected": TransactionStatus.REJECTED,
    "CommittedSuccess": TransactionStatus.COMMITTED_SUCCESS,
    "CommittedFailure": TransactionStatus.COMMITTED_FAILURE,
}


def transaction_status(response: dict[str, Any]) -> TransactionStatus:
    """Classify on ``status``; ``intent_status`` only fills in when that is Unknown."""
    status = TransactionStatus.parse(response.get("status"))
    if status != TransactionStatus.UNKNOWN:
        return status
    return _INTENT_STATUSES.get(
        str(response.get("intent_status")), TransactionStatus.UNKNOWN
    )


def created_entities(details: dict[str, Any]) -> list[CreatedEntity]:
    """New global entities listed in a committed transaction's receipt."""
    transaction = details.get("transaction") or details
    receipt = transaction.get("receipt") or details.get("receipt") or {}
    state_updates = receipt.get("state_updates") or {}
    entities = []
    for entity in state_updates.get("new_global_entities") or []:
        address = entity.get("entity_address")
        if address:
            entities.append(
                CreatedEntity(
                    entity_address=address, entity_type=str(entity.get("entity_type"))
                )
            )
    return entities


async def extract_created_entity(
    gateway: GatewayClient,
    intent_hash: str,
    entity_type: EntityType | str,
    *,
    max_attempts: int = POLL_MAX_ATTEMPTS,
    poll_interval_s: float = POLL_INTERVAL_S,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> CreatedEntity:
    """Poll until ``intent_hash`` commits, then return the first new entity of ``entity_type``.

    Raises ExtractionNotFound when the transaction failed or created no such
    entity, ExtractionTimeout when it never reached a terminal status.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    wanted = str(entity_type)

    for attempt in range(1, max_attempts + 1):
        logger.debug(
            f"Polling {intent_hash} for {wanted} (attempt {attempt}/{max_attempts})"
        )
        try:
            response = await gateway.get_transaction_status(intent_hash)
            status = transaction_status(response)
        except httpx.HTTPError as exc:
            logger.warning(f"Status query for {intent_hash} failed: {exc}")
            status = TransactionStatus.UNKNOWN

        details = None
        if status == TransactionStatus.COMMITTED_SUCCESS:
            try:
                details = await gateway.get_transaction_details(intent_hash)
            except httpx.HTTPError as exc:
                logger.warning(f"Details query for {intent_hash} failed: {exc}")

        if details is not None:
            for entity in created_entities(details):
                if entity.entity_type == wanted:
                    logger.info(
                        f"Found {wanted} {entity.entity_address} from {intent_hash}"
                    )
                    return entity
            raise ExtractionNotFound(intent_hash, status.value)

        if status in TERMINAL_FAILURES:
            raise ExtractionNotFound(
                intent_hash,
                status.value,
                f"Transaction {intent_hash} ended with {status.value}",
            )

        if attempt < max_attempts:
            await sleep(poll_interval_s)

    raise ExtractionTimeout(intent_hash, max_attempts)
