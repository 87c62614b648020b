from __future__ import annotations

from collections.abc import Mapping
from typing import Any

REDACTED = "[REDACTED]"

_SENSITIVE_MARKERS = (
    "private",
    "mnemonic",
    "seed",
    "password",
    "passphrase",
    "secret",
    "key",
)
# Public material that happens to contain a sensitive marker.
_ALLOWED_KEYS = {"public_key", "notary_public_key", "public_key_hex", "key_type"}


def is_sensitive_key(name: str) -> bool:
    lowered = str(name).lower().replace("-", "_")
    if lowered in _ALLOWED_KEYS:
        return False
    compact = lowered.replace("_", "")
    return any(marker in compact for marker in _SENSITIVE_MARKERS)


def redact(value: Any) -> Any:
    """Return a copy of ``value`` with sensitive mapping entries masked."""
    if isinstance(value, Mapping):
        return {
            k: (REDACTED if is_sensitive_key(k) else redact(v))
            for k, v in value.items()
        }
    if isinstance(value, list | tuple):
        return type(value)(redact(v) for v in value)
    return value
