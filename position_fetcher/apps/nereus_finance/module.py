"""Nereus Finance product, built on the Aave v2 module's infrastructure.

Nereus deploys its own Aave-v2-shaped market. It reuses the Aave v2 contract
factory and lending template as-is and contributes only its provider
addresses; no fetch-cycle state is shared between the two products.
"""
from __future__ import annotations

import logging
from typing import Sequence

from ...config import MarketConfig
from ...protocols.aave_v2.lending_template import build_lending_fetchers
from ...template.app_token import AppTokenTemplatePositionFetcher
from ..aave_v2.module import AaveV2AppModule

logger = logging.getLogger(__name__)

NEREUS_FINANCE_APP_ID = "nereus-finance"


class NereusFinanceAppModule:
    def __init__(
        self,
        aave_v2: AaveV2AppModule,
        markets: Sequence[MarketConfig],
        token_aliases: dict[str, str] | None = None,
    ) -> None:
        self.app_id = NEREUS_FINANCE_APP_ID
        self.contract_factory = aave_v2.contract_factory
        self.fetchers: tuple[AppTokenTemplatePositionFetcher, ...] = tuple(
            fetcher
            for market in markets
            for fetcher in build_lending_fetchers(
                self.app_id,
                market.network,
                market.provider_address,
                self.contract_factory,
                token_aliases,
                market.label,
            )
        )
        logger.info("%s: %d markets, %d fetchers", self.app_id, len(markets), len(self.fetchers))
