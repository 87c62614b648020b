from __future__ import annotations

from typing import Protocol, runtime_checkable

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from radix_agent_kit.core.config import load_wallet_credentials


@runtime_checkable
class RadixWallet(Protocol):
    """Account address plus a notary key able to sign transaction hashes."""

    def get_address(self) -> str: ...

    def get_public_key_hex(self) -> str: ...

    def sign(self, message: bytes) -> bytes: ...


class Ed25519Wallet:
    def __init__(self, private_key: Ed25519PrivateKey, address: str):
        if not address:
            raise ValueError("wallet address is required")
        self._private_key = private_key
        self._address = address.strip()

    @classmethod
    def from_private_key_hex(cls, private_key_hex: str, address: str) -> Ed25519Wallet:
        raw = private_key_hex.strip().removeprefix("0x")
        try:
            key_bytes = bytes.fromhex(raw)
        except ValueError as exc:
            raise ValueError("private key must be hex encoded") from exc
        if len(key_bytes) != 32:
            raise ValueError("Ed25519 private key must be 32 bytes")
        return cls(Ed25519PrivateKey.from_private_bytes(key_bytes), address)

    @classmethod
    def from_config(cls) -> Ed25519Wallet:
        creds = load_wallet_credentials()
        if creds is None:
            raise ValueError("wallet address and private key not configured")
        return cls.from_private_key_hex(creds["private_key_hex"], creds["address"])

    @classmethod
    def generate(cls, address: str) -> Ed25519Wallet:
        return cls(Ed25519PrivateKey.generate(), address)

    def get_address(self) -> str:
        return self._address

    def get_public_key_bytes(self) -> bytes:
        return self._private_key.public_key().public_bytes(
            Encoding.Raw, PublicFormat.Raw
        )

    def get_public_key_hex(self) -> str:
        return self.get_public_key_bytes().hex()

    def export_private_key_hex(self) -> str:
        return self._private_key.private_bytes(
            Encoding.Raw, PrivateFormat.Raw, NoEncryption()
        ).hex()

    def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message)

    def __repr__(self) -> str:
        return f"Ed25519Wallet(address={self._address!r})"
