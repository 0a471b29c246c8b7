"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from eth_utils import is_hex_address

logger = logging.getLogger(__name__)

MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NetworkConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30
    multicall_address: str = MULTICALL3_ADDRESS
    multicall_chunk_size: int = 200


@dataclass(frozen=True)
class MarketConfig:
    network: str = ""
    provider_address: str = ""
    label: str = ""


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)
    token_aliases: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AppConfig:
    networks: dict[str, NetworkConfig] = field(default_factory=dict)
    apps: dict[str, tuple[MarketConfig, ...]] = field(default_factory=dict)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)


KNOWN_APPS = ("aave-v2", "nereus-finance")
KNOWN_ORACLES = ("pyth",)

# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_networks(raw: dict[str, Any]) -> dict[str, NetworkConfig]:
    networks: dict[str, NetworkConfig] = {}
    for name, cfg in raw.items():
        networks[name] = NetworkConfig(
            rpc_endpoints=tuple(e for e in cfg.get("rpc_endpoints", []) if e),
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
            multicall_address=cfg.get("multicall_address", MULTICALL3_ADDRESS),
            multicall_chunk_size=int(cfg.get("multicall_chunk_size", 200)),
        )
    return networks


def _build_apps(raw: dict[str, Any]) -> dict[str, tuple[MarketConfig, ...]]:
    apps: dict[str, tuple[MarketConfig, ...]] = {}
    for app_id, cfg in raw.items():
        markets = [
            MarketConfig(
                network=m.get("network", ""),
                provider_address=str(m.get("provider_address", "")).strip(),
                label=m.get("label", ""),
            )
            for m in (cfg or {}).get("markets", [])
        ]
        apps[app_id] = tuple(markets)
    return apps


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=dict(pyth_raw.get("feeds", {})),
        ),
        token_aliases={
            str(k).upper(): str(v).upper()
            for k, v in raw.get("token_aliases", {}).items()
        },
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from the package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        networks=_build_networks(raw.get("networks", {})),
        apps=_build_apps(raw.get("apps", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.networks:
        raise ValueError("At least one network must be configured")

    for name, network in cfg.networks.items():
        if not network.rpc_endpoints:
            raise ValueError(f"Network '{name}' has no RPC endpoints")
        if network.multicall_chunk_size < 1:
            raise ValueError(f"Network '{name}' has a non-positive multicall chunk size")

    if cfg.price_oracle.provider not in KNOWN_ORACLES:
        raise ValueError(f"Unknown price oracle provider '{cfg.price_oracle.provider}'")

    for app_id, markets in cfg.apps.items():
        if app_id not in KNOWN_APPS:
            raise ValueError(f"Unknown app '{app_id}'")
        for market in markets:
            if market.network not in cfg.networks:
                raise ValueError(
                    f"App '{app_id}' references unknown network '{market.network}'"
                )
            if not market.provider_address:
                raise ValueError(
                    f"App '{app_id}' has a market on '{market.network}' with no provider address"
                )
            if not is_hex_address(market.provider_address):
                raise ValueError(
                    f"App '{app_id}' has a malformed provider address "
                    f"'{market.provider_address}'"
                )
