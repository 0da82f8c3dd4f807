"""Settings loading and client construction from settings.

Sources, lowest precedence first:

1. YAML file (``DEXCLIENT_CONFIG`` or ``./config.yml``)
2. ``DEXCLIENT_<FIELD>`` / ``DEXCLIENT_PROXY__<FIELD>`` environment variables

The API key may be given inline (``api_key``) or read from a file
(``api_key_file``, relative to the config file), which suits secrets mounted
by an orchestrator.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .client import DexClient
from .settings import Settings
from .transport import ProxyConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "DEXCLIENT_"
CONFIG_ENV = ENV_PREFIX + "CONFIG"

# Environment names handled elsewhere.
_RESERVED_ENV = {"CONFIG", "LOG_LEVEL"}

# Taken verbatim from the environment; YAML would turn "0x12" or "1e5" into numbers.
_LITERAL_KEYS = {
    ("api_key",),
    ("api_key_file",),
    ("base_url",),
    ("default_market",),
    ("proxy", "url"),
    ("proxy", "username"),
    ("proxy", "password"),
}


def _read_yaml(path: Path) -> dict[str, Any]:
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config root must be a mapping, got: {type(loaded)!r}")
    return loaded


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for key, raw in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        remainder = key[len(ENV_PREFIX) :]
        if remainder in _RESERVED_ENV:
            continue

        path = tuple(p.lower() for p in remainder.split("__") if p)
        if not path:
            continue

        if path in _LITERAL_KEYS:
            value: Any = raw
        else:
            try:
                value = yaml.safe_load(raw)
            except yaml.YAMLError:
                value = raw

        target = overrides
        for part in path[:-1]:
            target = target.setdefault(part, {})
            if not isinstance(target, dict):
                raise ValueError(f"Conflicting environment overrides for {key}")
        target[path[-1]] = value
    return overrides


def _merge(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_api_key_file(data: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    key_file = data.pop("api_key_file", None)
    if key_file is None:
        return data
    if data.get("api_key") is not None:
        raise ValueError("Set either api_key or api_key_file, not both")

    path = Path(key_file)
    if not path.is_absolute():
        path = base_dir / path
    try:
        data["api_key"] = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ValueError(f"Cannot read api_key_file {path}: {exc}") from exc
    return data


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from YAML and the environment.

    Raises:
        ValueError: If the file is malformed or the settings are invalid
    """
    environ = os.environ if environ is None else environ
    path = Path(config_path or environ.get(CONFIG_ENV, "config.yml"))

    data = _read_yaml(path) if path.exists() else {}
    data = _merge(data, _env_overrides(environ))
    data = _resolve_api_key_file(data, path.parent)

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def create_client_from_settings(settings: Settings) -> DexClient:
    """Create a DEX client from settings configuration."""
    proxy = None
    if settings.proxy.enabled:
        proxy = ProxyConfig(
            url=settings.proxy.url,
            username=settings.proxy.username,
            password=settings.proxy.password.get_secret_value() if settings.proxy.password else None,
        )

    client = DexClient(
        settings.api_key.get_secret_value(),
        settings.base_url,
        auth_mode=settings.auth_mode,
        default_market=settings.default_market,
        timeout=settings.timeout,
        proxy=proxy,
    )
    logger.info("Initialized DEX client for %s (auth=%s)", client.base_url, settings.auth_mode.value)
    return client
