from __future__ import annotations

import hashlib
import json
import re
import secrets
from dataclasses import asdict, dataclass
from typing import Any

import httpx
from loguru import logger

from radix_agent_kit.core.clients.GatewayClient import GatewayClient
from radix_agent_kit.core.constants.base import (
    DEFAULT_TIP_PERCENTAGE,
    EPOCH_WINDOW,
    FEE_STANDARD,
)
from radix_agent_kit.core.errors import (
    BuildError,
    DuplicateTransactionError,
    SubmissionError,
)
from radix_agent_kit.core.manifest.instructions import Manifest
from radix_agent_kit.core.manifest.values import AddressValue, DecimalValue
from radix_agent_kit.core.utils.retry import request_never_sent
from radix_agent_kit.core.wallet import RadixWallet

TRANSACTION_VERSION = 1


@dataclass(frozen=True)
class TransactionHeader:
    network_id: int
    start_epoch_inclusive: int
    end_epoch_exclusive: int
    nonce: int
    notary_public_key: str
    notary_is_signatory: bool = True
    tip_percentage: int = DEFAULT_TIP_PERCENTAGE


@dataclass(frozen=True)
class CompiledTransaction:
    intent_hash: str
    payload: bytes
    header: TransactionHeader
    label: str | None = None

    def hex(self) -> str:
        return self.payload.hex()


@dataclass(frozen=True)
class SubmissionResult:
    intent_hash: str
    duplicate: bool = False


def make_header(
    *,
    network_id: int,
    current_epoch: int,
    notary_public_key: str,
    epoch_window: int = EPOCH_WINDOW,
    tip_percentage: int = DEFAULT_TIP_PERCENTAGE,
) -> TransactionHeader:
    """Fresh header for ``current_epoch``; the nonce is new on every call."""
    if current_epoch < 0:
        raise ValueError(f"Invalid epoch: {current_epoch}")
    return TransactionHeader(
        network_id=network_id,
        start_epoch_inclusive=current_epoch,
        end_epoch_exclusive=current_epoch + epoch_window,
        nonce=secrets.randbits(32),
        notary_public_key=notary_public_key,
        notary_is_signatory=True,
        tip_percentage=tip_percentage,
    )


def canonical_json(value: Any) -> bytes:
    return json.dumps(
        value, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode()


def hash_bytes(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


_LOCK_FEE_CALL = re.compile(
    r'^\s*CALL_METHOD\s+Address\("[^"]+"\)\s+"lock_fee"', re.MULTILINE
)


def _locks_fee(manifest: Manifest | str) -> bool:
    if isinstance(manifest, Manifest):
        return any(method == "lock_fee" for _, method in manifest.method_calls())
    return _LOCK_FEE_CALL.search(manifest) is not None


def _manifest_text(manifest: Manifest | str, fee_payer: str) -> str:
    if isinstance(manifest, Manifest):
        text = manifest.render()
        has_lock = _locks_fee(manifest)
    else:
        text = str(manifest or "")
        has_lock = _locks_fee(text)
    if not text.strip():
        raise BuildError("Cannot build a transaction from an empty manifest")
    if not has_lock:
        # Custom manifests without a fee lock get one from the notary's account.
        lock = (
            "CALL_METHOD\n"
            f"    {AddressValue(fee_payer).render()}\n"
            '    "lock_fee"\n'
            f"    {DecimalValue(FEE_STANDARD).render()}\n;\n"
        )
        text = lock + text
    return text


def build_transaction(
    manifest: Manifest | str,
    wallet: RadixWallet,
    current_epoch: int,
    *,
    network_id: int,
    label: str | None = None,
) -> CompiledTransaction:
    """Compile, sign and notarize ``manifest`` for ``current_epoch``.

    The intent hash doubles as the transaction id. Any failure is a BuildError.
    """
    try:
        text = _manifest_text(manifest, wallet.get_address())
        header = make_header(
            network_id=network_id,
            current_epoch=int(current_epoch),
            notary_public_key=wallet.get_public_key_hex(),
        )
        intent = {
            "version": TRANSACTION_VERSION,
            "header": asdict(header),
            "manifest": text,
            "message": label or "",
        }
        intent_hash = hash_bytes(canonical_json(intent))
        signed_intent = {"intent": intent, "intent_signatures": []}
        signed_intent_hash = hash_bytes(canonical_json(signed_intent))
        notary_signature = wallet.sign(signed_intent_hash)
        notarized = {
            "signed_intent": signed_intent,
            "notary_signature": notary_signature.hex(),
        }
        payload = canonical_json(notarized)
    except BuildError:
        raise
    except Exception as exc:
        raise BuildError(f"Failed to build transaction: {exc}") from exc

    compiled = CompiledTransaction(
        intent_hash=intent_hash.hex(), payload=payload, header=header, label=label
    )
    logger.info(
        f"Built transaction {compiled.intent_hash} ({label or 'unlabelled'}) "
        f"epochs [{header.start_epoch_inclusive}, {header.end_epoch_exclusive})"
    )
    return compiled


async def submit_transaction(
    gateway: GatewayClient, compiled: CompiledTransaction
) -> SubmissionResult:
    """Submit a compiled transaction and classify the gateway's answer."""
    logger.info(f"Submitting transaction {compiled.intent_hash}...")
    try:
        response = await gateway.submit_transaction(compiled.hex())
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        # Only a rate limit proves the payload was not taken; a 5xx may hide an accept.
        raise SubmissionError(
            f"Gateway rejected transaction {compiled.intent_hash}: HTTP {status}",
            transient=status == 429,
            status_code=status,
        ) from exc
    except httpx.TransportError as exc:
        if request_never_sent(exc):
            raise SubmissionError(
                f"Could not reach gateway to submit {compiled.intent_hash}: {exc}",
                transient=True,
            ) from exc
        raise SubmissionError(
            f"Outcome of {compiled.intent_hash} is unknown ({type(exc).__name__}: "
            f"{exc}); check its status before resubmitting",
        ) from exc

    if response.get("duplicate"):
        raise DuplicateTransactionError(compiled.intent_hash)
    logger.info(f"Transaction submitted: {compiled.intent_hash}")
    return SubmissionResult(intent_hash=compiled.intent_hash, duplicate=False)


async def send_manifest(
    gateway: GatewayClient,
    manifest: Manifest | str,
    wallet: RadixWallet,
    *,
    network_id: int,
    label: str | None = None,
) -> str:
    """Fetch the epoch, build and submit; return the transaction id."""
    try:
        epoch = await gateway.get_current_epoch()
    except (httpx.HTTPError, ValueError) as exc:
        raise SubmissionError(
            f"Could not fetch current epoch: {exc}", transient=True
        ) from exc
    compiled = build_transaction(
        manifest, wallet, epoch, network_id=network_id, label=label
    )
    result = await submit_transaction(gateway, compiled)
    return result.intent_hash
