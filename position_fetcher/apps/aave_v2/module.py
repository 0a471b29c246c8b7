"""Aave v2 product: contract factory plus one fetcher per market and role."""
from __future__ import annotations

import logging
from typing import Sequence

from ...chains.evm.toolkit import EvmToolkit
from ...config import MarketConfig
from ...contracts.aave_v2 import AaveV2ContractFactory
from ...protocols.aave_v2.lending_template import build_lending_fetchers
from ...template.app_token import AppTokenTemplatePositionFetcher

logger = logging.getLogger(__name__)

AAVE_V2_APP_ID = "aave-v2"


class AaveV2AppModule:
    def __init__(
        self,
        toolkit: EvmToolkit,
        markets: Sequence[MarketConfig],
        token_aliases: dict[str, str] | None = None,
    ) -> None:
        self.app_id = AAVE_V2_APP_ID
        self.contract_factory = AaveV2ContractFactory(toolkit)
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
