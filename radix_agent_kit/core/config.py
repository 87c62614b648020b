import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from radix_agent_kit.core.constants.base import (
    DUPLICATE_POLICIES,
    DUPLICATE_POLICY_FAIL,
    POLL_INTERVAL_S,
    POLL_MAX_ATTEMPTS,
)

CONFIG_PATH_ENV_VARS = ("RADIX_AGENT_CONFIG_PATH", "RADIX_AGENT_CONFIG")
CONFIG_FILENAME = "config.json"
_DEFAULT_NETWORK = "stokenet"


def _repo_root() -> Path | None:
    """Nearest directory holding pyproject.toml, from the cwd first, then this package."""
    for start in (Path.cwd(), Path(__file__).parent):
        here = start.resolve()
        root = next(
            (d for d in (here, *here.parents) if (d / "pyproject.toml").is_file()),
            None,
        )
        if root is not None:
            return root
    return None


def _env_config_path() -> str | None:
    for name in CONFIG_PATH_ENV_VARS:
        value = (os.environ.get(name) or "").strip()
        if value:
            return value
    return None


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Explicit ``path``, else the env override, else ``config.json`` at the repo root.

    Relative env paths are taken relative to the repo root, not the cwd.
    """
    if path is not None:
        return Path(path).expanduser()
    target = Path(_env_config_path() or CONFIG_FILENAME).expanduser()
    if target.is_absolute():
        return target
    root = _repo_root()
    return root / target if root is not None else target


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    cfg_path = resolve_config_path(path)
    if not cfg_path.is_file():
        if require_exists:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    try:
        data = json.loads(cfg_path.read_text())
    except json.JSONDecodeError as exc:
        logger.warning(f"Ignoring malformed config {cfg_path}: {exc}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {cfg_path}: top level must be an object")
        return {}
    return data


def write_config_json(path: str | Path | None, config: dict[str, Any]) -> Path:
    cfg_path = resolve_config_path(path)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(json.dumps(config, indent=2, sort_keys=True) + "\n")
    return cfg_path


CONFIG: dict[str, Any] = load_config_json()


def set_config(config: dict[str, Any]) -> None:
    """Replace the global CONFIG dict in-place.

    Modules that imported CONFIG at import time see the new values.
    """
    CONFIG.clear()
    CONFIG.update(config)


def load_config(
    path: str | Path | None = None, *, require_exists: bool = False
) -> None:
    """Load config from disk into the global CONFIG dict."""
    set_config(load_config_json(path, require_exists=require_exists))


def get_network_name() -> str:
    network = CONFIG.get("network") or os.environ.get("RADIX_NETWORK")
    if network:
        return str(network).strip().lower()
    return _DEFAULT_NETWORK


def get_network_overrides(network: str) -> dict[str, Any]:
    overrides = CONFIG.get("networks", {}).get(network, {})
    return dict(overrides) if isinstance(overrides, dict) else {}


def get_gateway_url(network: str) -> str | None:
    url = get_network_overrides(network).get("gateway_url")
    if url:
        return str(url).strip().rstrip("/")
    return None


def load_wallet_credentials(path: str | Path | None = None) -> dict[str, str] | None:
    """Return ``{"address", "private_key_hex"}`` from config or env, if both are set."""
    config = CONFIG if path is None else load_config_json(path)
    wallet = config.get("wallet") or {}
    address = wallet.get("address") or os.environ.get("RADIX_ACCOUNT_ADDRESS")
    private_key_hex = wallet.get("private_key_hex") or os.environ.get(
        "RADIX_PRIVATE_KEY"
    )
    if not address or not private_key_hex:
        return None
    return {
        "address": str(address).strip(),
        "private_key_hex": str(private_key_hex).strip(),
    }


def get_polling_settings() -> tuple[int, float]:
    polling = CONFIG.get("polling", {})
    max_attempts = int(polling.get("max_attempts", POLL_MAX_ATTEMPTS))
    interval_s = float(polling.get("interval_s", POLL_INTERVAL_S))
    return max_attempts, interval_s


def get_duplicate_policy() -> str:
    policy = str(CONFIG.get("duplicate_policy", DUPLICATE_POLICY_FAIL)).lower()
    if policy not in DUPLICATE_POLICIES:
        raise ValueError(
            f"Unknown duplicate_policy '{policy}', expected one of {DUPLICATE_POLICIES}"
        )
    return policy
