"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from position_fetcher.chains.evm.toolkit import EvmToolkit
from position_fetcher.config import (
    AppConfig,
    MarketConfig,
    NetworkConfig,
    PriceOracleConfig,
    PythConfig,
)
from position_fetcher.models import (
    AppTokenPosition,
    DisplayProps,
    LendingTokenDataProps,
    TokenRole,
    UnderlyingToken,
)
from tests.fakes import (
    AAVE_PROVIDER,
    NEREUS_PROVIDER,
    RAY,
    FakeAaveMarket,
    FakeEvmClient,
    addr,
)

# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_network_config() -> NetworkConfig:
    return NetworkConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_app_config(sample_network_config: NetworkConfig) -> AppConfig:
    return AppConfig(
        networks={"ethereum": sample_network_config, "avalanche": sample_network_config},
        apps={
            "aave-v2": (MarketConfig(network="ethereum", provider_address=AAVE_PROVIDER),),
            "nereus-finance": (
                MarketConfig(network="avalanche", provider_address=NEREUS_PROVIDER),
            ),
        },
        price_oracle=PriceOracleConfig(
            provider="pyth",
            pyth=PythConfig(feeds={"ETH": "aaa", "USDC": "bbb"}),
            token_aliases={"WETH": "ETH"},
        ),
    )


@pytest.fixture()
def fake_client() -> FakeEvmClient:
    return FakeEvmClient("ethereum")


@pytest.fixture()
def toolkit(sample_network_config: NetworkConfig, fake_client: FakeEvmClient) -> EvmToolkit:
    kit = EvmToolkit({"ethereum": sample_network_config})
    kit._clients["ethereum"] = fake_client  # type: ignore[assignment]
    return kit


@pytest.fixture()
def aave_market(fake_client: FakeEvmClient) -> FakeAaveMarket:
    """Three reserves: USDC, WETH, DAI."""
    market = FakeAaveMarket(fake_client, AAVE_PROVIDER)
    market.add_reserve(
        1, "USDC", decimals=6, a_supply=1000, variable_supply=400, stable_supply=0,
        liquidity_rate=3 * RAY // 100, variable_borrow_rate=5 * RAY // 100,
        stable_borrow_rate=7 * RAY // 100, liquidation_threshold=8800,
    )
    market.add_reserve(
        2, "WETH", a_supply=10, variable_supply=4, stable_supply=1,
        liquidity_rate=RAY // 100, variable_borrow_rate=2 * RAY // 100,
        stable_borrow_rate=4 * RAY // 100, liquidation_threshold=8250,
    )
    market.add_reserve(
        3, "DAI", a_supply=500, variable_supply=250, stable_supply=50,
        liquidity_rate=2 * RAY // 100, variable_borrow_rate=4 * RAY // 100,
        stable_borrow_rate=9 * RAY // 100, liquidation_threshold=7700,
        collateral_enabled=False,
    )
    return market.install()


@pytest.fixture()
def sample_prices() -> dict[str, float]:
    return {"USDC": 1.0, "ETH": 2000.0, "DAI": 1.0}


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_position() -> AppTokenPosition:
    return AppTokenPosition(
        app_id="aave-v2",
        group_id="variable-debt",
        network="ethereum",
        address=addr(2),
        role=TokenRole.VARIABLE_DEBT,
        symbol="variableDebtUSDC",
        decimals=6,
        supply=100.0,
        price=2.0,
        price_per_share=1.0,
        underlying=UnderlyingToken(address=addr(1), symbol="USDC", decimals=6, price=2.0),
        data_props=LendingTokenDataProps(
            apy=0.05,
            enabled_as_collateral=True,
            liquidity=-200.0,
            liquidation_threshold=0.88,
            is_active=True,
        ),
        display_props=DisplayProps(label="USDC", label_detailed="variableDebtUSDC"),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent(f"""\
    networks:
      ethereum:
        rpc_endpoints: ["https://rpc.example.com", "${{MISSING_RPC_URL_XYZ}}"]
        rpc_timeout: 10
        multicall_chunk_size: 50
      avalanche:
        rpc_endpoints: ["https://avax.example.com"]
    apps:
      aave-v2:
        markets:
          - network: ethereum
            label: main
            provider_address: "{AAVE_PROVIDER}"
      nereus-finance:
        markets:
          - network: avalanche
            provider_address: "${{NEREUS_PROVIDER_ADDRESS}}"
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {{ETH: "aaa", USDC: "bbb"}}
      token_aliases: {{weth: eth}}
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("NEREUS_PROVIDER_ADDRESS", NEREUS_PROVIDER)
    monkeypatch.delenv("MISSING_RPC_URL_XYZ", raising=False)
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
