"""Fetch orchestration — every configured market, isolated per market."""
from __future__ import annotations

import asyncio
import logging

from ..apps.aave_v2 import AAVE_V2_APP_ID, AaveV2AppModule
from ..apps.nereus_finance import NEREUS_FINANCE_APP_ID, NereusFinanceAppModule
from ..chains.evm.toolkit import EvmToolkit
from ..config import AppConfig, PriceOracleConfig
from ..errors import DiscoveryError
from ..interfaces.price_oracle import PriceOracle
from ..interfaces.protocol_adapter import PositionFetcher
from ..models import (
    MarketFailure,
    PositionFetchResult,
    PositionReport,
    TokenBalance,
)
from ..oracles import PythOracle
from ..protocols.aave_v2.balances import LendingBalanceFetcher

logger = logging.getLogger(__name__)


def build_price_oracle(config: PriceOracleConfig) -> PriceOracle:
    """The price oracle named by ``config.provider``."""
    if config.provider == "pyth":
        return PythOracle(config.pyth)
    raise ValueError(f"Unknown price oracle provider '{config.provider}'")


class PositionService:
    """Builds the app modules from config and runs their fetch cycles."""

    def __init__(self, config: AppConfig, oracle: PriceOracle | None = None) -> None:
        self._config = config
        self._toolkit = EvmToolkit(config.networks)
        aliases = config.price_oracle.token_aliases

        aave_v2 = AaveV2AppModule(
            self._toolkit, config.apps.get(AAVE_V2_APP_ID, ()), aliases
        )
        nereus = NereusFinanceAppModule(
            aave_v2, config.apps.get(NEREUS_FINANCE_APP_ID, ()), aliases
        )
        self._fetchers: tuple[PositionFetcher, ...] = aave_v2.fetchers + nereus.fetchers

        self._oracle: PriceOracle = oracle or build_price_oracle(config.price_oracle)
        self._balances = LendingBalanceFetcher(self._toolkit)

    @property
    def fetchers(self) -> tuple[PositionFetcher, ...]:
        return self._fetchers

    def select(
        self, app_id: str | None = None, network: str | None = None
    ) -> list[PositionFetcher]:
        return [
            f
            for f in self._fetchers
            if (app_id is None or f.app_id == app_id)
            and (network is None or f.network == network)
        ]

    async def fetch_prices(self) -> dict[str, float]:
        prices = await self._oracle.fetch_prices()
        return {symbol.upper(): price for symbol, price in prices.items()}

    async def fetch_positions(
        self,
        app_id: str | None = None,
        network: str | None = None,
        prices: dict[str, float] | None = None,
    ) -> PositionReport:
        """Fetch every selected market; a failed market contributes nothing."""
        if prices is None:
            prices = await self.fetch_prices()

        fetchers = self.select(app_id, network)
        results = await asyncio.gather(
            *(self._fetch_market(fetcher, prices) for fetcher in fetchers)
        )

        positions = []
        failures = []
        market_failures = []
        for result, market_failure in results:
            positions.extend(result.positions)
            failures.extend(result.failures)
            if market_failure is not None:
                market_failures.append(market_failure)

        logger.info(
            "Fetched %d positions from %d markets (%d positions dropped, %d markets failed)",
            len(positions), len(fetchers), len(failures), len(market_failures),
        )
        return PositionReport(
            positions=tuple(positions),
            failures=tuple(failures),
            market_failures=tuple(market_failures),
        )

    @staticmethod
    async def _fetch_market(
        fetcher: PositionFetcher, prices: dict[str, float]
    ) -> tuple[PositionFetchResult, MarketFailure | None]:
        try:
            return await fetcher.fetch_positions(prices), None
        except DiscoveryError as e:
            logger.error(
                "%s/%s on %s failed: %s",
                fetcher.app_id, fetcher.group_id, fetcher.network, e,
            )
            return PositionFetchResult(), MarketFailure(
                app_id=fetcher.app_id,
                group_id=fetcher.group_id,
                network=fetcher.network,
                market_address=fetcher.market_address,
                error=e,
            )

    async def fetch_balances(
        self,
        wallet_address: str,
        app_id: str | None = None,
        network: str | None = None,
    ) -> tuple[list[TokenBalance], PositionReport]:
        """A wallet's non-zero balances across the selected markets."""
        report = await self.fetch_positions(app_id, network)
        balances = await self._balances.fetch_balances(wallet_address, report.positions)
        return balances, report
