"""Integration tests for the service layer: Aave v2 and Nereus side by side."""
from __future__ import annotations

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from position_fetcher.apps.aave_v2 import AaveV2AppModule
from position_fetcher.apps.nereus_finance import NereusFinanceAppModule
from position_fetcher.chains.evm.client import EvmClient
from position_fetcher.chains.evm.toolkit import EvmToolkit
from position_fetcher.config import AppConfig, MarketConfig, NetworkConfig, PriceOracleConfig
from position_fetcher.contracts.erc20 import Erc20
from position_fetcher.errors import DiscoveryError
from position_fetcher.models import TokenRole
from position_fetcher.oracles import PythOracle
from position_fetcher.services import PositionService
from position_fetcher.services.position_service import build_price_oracle
from tests.fakes import (
    AAVE_PROVIDER,
    NEREUS_PROVIDER,
    RAY,
    FakeAaveMarket,
    FakeEvmClient,
)

WALLET = "0x00000000000000000000000000000000000000aa"
PRICES = {"USDC": 1.0, "ETH": 2000.0, "DAI": 1.0}


@pytest.fixture()
def avalanche_client() -> FakeEvmClient:
    return FakeEvmClient("avalanche", block=40_000_000)


@pytest.fixture()
def nereus_market(avalanche_client: FakeEvmClient) -> FakeAaveMarket:
    market = FakeAaveMarket(avalanche_client, NEREUS_PROVIDER)
    market.add_reserve(
        1, "USDC", decimals=6, a_supply=300, variable_supply=100, stable_supply=10,
        liquidity_rate=4 * RAY // 100, variable_borrow_rate=6 * RAY // 100,
        stable_borrow_rate=8 * RAY // 100,
    )
    return market.install()


@pytest.fixture()
def service(
    sample_app_config: AppConfig,
    fake_client: FakeEvmClient,
    avalanche_client: FakeEvmClient,
    aave_market: FakeAaveMarket,
    nereus_market: FakeAaveMarket,
) -> PositionService:
    oracle = AsyncMock()
    oracle.fetch_prices = AsyncMock(return_value={"usdc": 1.0, "ETH": 2000.0, "DAI": 1.0})
    svc = PositionService(sample_app_config, oracle=oracle)
    svc._toolkit._clients["ethereum"] = fake_client  # type: ignore[assignment]
    svc._toolkit._clients["avalanche"] = avalanche_client  # type: ignore[assignment]
    return svc


class TestComposition:
    def test_nereus_shares_aave_contract_factory(self, toolkit: EvmToolkit) -> None:
        aave = AaveV2AppModule(
            toolkit, [MarketConfig(network="ethereum", provider_address=AAVE_PROVIDER)]
        )
        nereus = NereusFinanceAppModule(
            aave, [MarketConfig(network="ethereum", provider_address=NEREUS_PROVIDER)]
        )

        assert nereus.contract_factory is aave.contract_factory
        assert nereus.contract_factory.toolkit is toolkit
        assert {f.app_id for f in nereus.fetchers} == {"nereus-finance"}
        assert {f.market_address for f in nereus.fetchers} == {NEREUS_PROVIDER}
        assert {f.market_address for f in aave.fetchers} == {AAVE_PROVIDER}

    def test_no_markets_no_fetchers(self, toolkit: EvmToolkit) -> None:
        aave = AaveV2AppModule(toolkit, [])
        assert aave.fetchers == ()
        assert NereusFinanceAppModule(aave, []).fetchers == ()

    def test_service_builds_one_fetcher_per_role(self, service: PositionService) -> None:
        assert len(service.fetchers) == 6
        assert len(service.select(app_id="nereus-finance")) == 3
        assert len(service.select(network="ethereum")) == 3
        assert service.select(app_id="aave-v2", network="avalanche") == []


class TestFetchPositions:
    @pytest.mark.asyncio
    async def test_both_products(self, service: PositionService) -> None:
        report = await service.fetch_positions()

        assert report.failures == ()
        assert report.market_failures == ()
        aave = [p for p in report.positions if p.app_id == "aave-v2"]
        nereus = [p for p in report.positions if p.app_id == "nereus-finance"]
        assert len(aave) == 9
        assert len(nereus) == 3
        assert {p.network for p in nereus} == {"avalanche"}

        nereus_supply = next(p for p in nereus if p.role is TokenRole.SUPPLY)
        assert nereus_supply.symbol == "aUSDC"
        assert nereus_supply.data_props.apy == pytest.approx(0.04)

    @pytest.mark.asyncio
    async def test_prices_fetched_once_and_upper_cased(self, service: PositionService) -> None:
        report = await service.fetch_positions(app_id="nereus-finance")

        service._oracle.fetch_prices.assert_awaited_once()  # type: ignore[attr-defined]
        assert len(report.positions) == 3

    @pytest.mark.asyncio
    async def test_explicit_prices_skip_oracle(self, service: PositionService) -> None:
        await service.fetch_positions(prices=PRICES)
        service._oracle.fetch_prices.assert_not_awaited()  # type: ignore[attr-defined]

    @pytest.mark.asyncio
    async def test_unreachable_market_does_not_affect_other(
        self, service: PositionService, avalanche_client: FakeEvmClient
    ) -> None:
        avalanche_client.unreachable = True

        report = await service.fetch_positions(prices=PRICES)

        assert {p.app_id for p in report.positions} == {"aave-v2"}
        assert len(report.positions) == 9
        assert len(report.market_failures) == 3
        for failure in report.market_failures:
            assert failure.app_id == "nereus-finance"
            assert failure.market_address == NEREUS_PROVIDER
            assert isinstance(failure.error, DiscoveryError)

    @pytest.mark.asyncio
    async def test_null_block_number_isolated_to_its_market(
        self, service: PositionService
    ) -> None:
        # a live client whose node answers eth_blockNumber with null
        avalanche = EvmClient("avalanche", NetworkConfig(rpc_endpoints=("https://rpc.test.com",)))
        avalanche.rpc_call = AsyncMock(return_value=None)  # type: ignore[method-assign]
        service._toolkit._clients["avalanche"] = avalanche

        report = await service.fetch_positions(prices=PRICES)

        assert {p.app_id for p in report.positions} == {"aave-v2"}
        assert len(report.positions) == 9
        assert len(report.market_failures) == 3
        for failure in report.market_failures:
            assert failure.app_id == "nereus-finance"
            assert isinstance(failure.error, DiscoveryError)
            assert "non-hex" in str(failure.error)

    @pytest.mark.asyncio
    async def test_position_failure_reported(
        self, service: PositionService, aave_market: FakeAaveMarket
    ) -> None:
        aave_market.reserves[0].fail_reserve_data = True

        report = await service.fetch_positions(app_id="aave-v2", prices=PRICES)

        assert len(report.positions) == 6
        assert len(report.failures) == 3


class TestFetchBalances:
    @pytest.mark.asyncio
    async def test_signed_balances(
        self,
        service: PositionService,
        fake_client: FakeEvmClient,
        aave_market: FakeAaveMarket,
    ) -> None:
        usdc = aave_market.reserves[0]
        weth = aave_market.reserves[1]
        held = {usdc.a_token: 250 * 10**6, weth.variable_debt: 2 * 10**18}
        for reserve in aave_market.reserves:
            for token in (reserve.a_token, reserve.stable_debt, reserve.variable_debt):
                fake_client.on(
                    token,
                    Erc20.BALANCE_OF,
                    lambda owner, t=token: (held.get(t, 0) if owner == WALLET else 0,),
                )

        balances, report = await service.fetch_balances(WALLET, app_id="aave-v2")

        assert report.market_failures == ()
        by_symbol = {b.position.symbol: b for b in balances}
        assert set(by_symbol) == {"aUSDC", "variableDebtWETH"}
        assert by_symbol["aUSDC"].balance == pytest.approx(250.0)
        assert by_symbol["aUSDC"].balance_usd == pytest.approx(250.0)
        assert by_symbol["variableDebtWETH"].balance == pytest.approx(2.0)
        assert by_symbol["variableDebtWETH"].balance_usd == pytest.approx(-4000.0)

    @pytest.mark.asyncio
    async def test_unreadable_balance_skipped(self, service: PositionService) -> None:
        # no balanceOf handlers: every read reverts
        balances, report = await service.fetch_balances(WALLET, app_id="nereus-finance")

        assert balances == []
        assert len(report.positions) == 3

    @pytest.mark.asyncio
    async def test_malformed_wallet_rejected(self, service: PositionService) -> None:
        with pytest.raises(ValueError, match="Malformed wallet"):
            await service.fetch_balances("0xnope")


class TestPriceOracleSelection:
    def test_pyth_provider(self) -> None:
        assert isinstance(build_price_oracle(PriceOracleConfig(provider="pyth")), PythOracle)

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown price oracle provider"):
            build_price_oracle(PriceOracleConfig(provider="chainlink"))

    def test_service_uses_configured_provider(self, sample_app_config: AppConfig) -> None:
        config = replace(sample_app_config, price_oracle=PriceOracleConfig(provider="chainlink"))
        with pytest.raises(ValueError, match="chainlink"):
            PositionService(config)
