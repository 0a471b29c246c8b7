"""Generic app-token pipeline: discovery, underlying, metadata, data, display.

A stage set (``AppTokenStages``) supplies what varies per protocol; the
orchestrator runs the stages in order for every discovered token and keeps
per-token failures apart from the tokens that succeeded.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Generic, Protocol, TypeVar

from ..chains.evm.multicall import Multicall, gather_reads
from ..chains.evm.toolkit import EvmToolkit
from ..contracts.erc20 import Erc20
from ..errors import (
    ContractCallError,
    DiscoveryError,
    MalformedResponseError,
    PositionFetchError,
    ResolutionError,
)
from ..models import (
    AppTokenPosition,
    DisplayProps,
    LendingTokenDataProps,
    PositionFailure,
    PositionFetchResult,
    TokenRole,
    UnderlyingToken,
)

logger = logging.getLogger(__name__)

# the app token handle a stage set works with; it must at least read as ERC-20
ContractT = TypeVar("ContractT", bound=Erc20)


@dataclass(frozen=True)
class AppTokenContext:
    """Everything known about a token once metadata and price are resolved."""

    network: str
    address: str
    symbol: str
    decimals: int
    supply: float
    price: float
    price_per_share: float
    underlying: UnderlyingToken


class AppTokenStages(Protocol[ContractT]):
    """The protocol-specific half of the pipeline."""

    app_id: str
    network: str

    @property
    def group_id(self) -> str: ...

    @property
    def role(self) -> TokenRole: ...

    @property
    def market_address(self) -> str: ...

    def get_contract(self, address: str) -> ContractT: ...

    def get_underlying_contract(self, address: str) -> Erc20: ...

    async def get_addresses(self, multicall: Multicall) -> list[str]: ...

    async def get_underlying_token_address(self, contract: ContractT) -> str: ...

    async def get_price_per_share(self, app_token: AppTokenContext) -> float: ...

    async def get_data_props(
        self, app_token: AppTokenContext, multicall: Multicall
    ) -> LendingTokenDataProps: ...

    async def get_label(self, app_token: AppTokenContext) -> str: ...

    async def get_label_detailed(self, app_token: AppTokenContext) -> str: ...


def resolve_price(
    token_symbol: str,
    prices: dict[str, float],
    token_aliases: dict[str, str],
) -> float | None:
    """Resolve the price for a token, falling back to aliases."""
    symbol = token_symbol.upper()
    if symbol in prices:
        return prices[symbol]
    alias = token_aliases.get(symbol)
    if alias is not None and alias in prices:
        return prices[alias]
    return None


class AppTokenTemplatePositionFetcher(Generic[ContractT]):
    """Runs an ``AppTokenStages`` set for one market and role."""

    def __init__(
        self,
        stages: AppTokenStages[ContractT],
        toolkit: EvmToolkit,
        token_aliases: dict[str, str] | None = None,
    ) -> None:
        self._stages = stages
        self._toolkit = toolkit
        self._token_aliases = dict(token_aliases or {})

    @property
    def app_id(self) -> str:
        return self._stages.app_id

    @property
    def group_id(self) -> str:
        return self._stages.group_id

    @property
    def network(self) -> str:
        return self._stages.network

    @property
    def role(self) -> TokenRole:
        return self._stages.role

    @property
    def market_address(self) -> str:
        return self._stages.market_address

    async def fetch_positions(self, prices: dict[str, float]) -> PositionFetchResult:
        """One fetch cycle. Raises ``DiscoveryError``; per-token errors are collected."""
        try:
            multicall = await self._toolkit.pinned_multicall(self.network)
        except RuntimeError as e:
            raise DiscoveryError(self.network, self.market_address, str(e)) from e

        addresses = await self._stages.get_addresses(multicall)
        logger.info(
            "%s/%s on %s: discovered %d tokens",
            self.app_id, self.group_id, self.network, len(addresses),
        )

        outcomes = await asyncio.gather(
            *(self._build_position(address, multicall, prices) for address in addresses),
            return_exceptions=True,
        )

        positions: list[AppTokenPosition] = []
        failures: list[PositionFailure] = []
        for address, outcome in zip(addresses, outcomes):
            if isinstance(outcome, PositionFetchError):
                logger.warning(
                    "%s/%s on %s: dropping %s: %s",
                    self.app_id, self.group_id, self.network, address, outcome,
                )
                failures.append(PositionFailure(address=address, error=outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                positions.append(outcome)

        return PositionFetchResult(positions=tuple(positions), failures=tuple(failures))

    async def _build_position(
        self, address: str, multicall: Multicall, prices: dict[str, float]
    ) -> AppTokenPosition:
        contract = multicall.wrap(self._stages.get_contract(address))

        underlying_address = await self._stages.get_underlying_token_address(contract)
        app_token = await self._resolve_token(contract, underlying_address, multicall, prices)

        data_props = await self._stages.get_data_props(app_token, multicall)
        display_props = DisplayProps(
            label=await self._stages.get_label(app_token),
            label_detailed=await self._stages.get_label_detailed(app_token),
        )

        return AppTokenPosition(
            app_id=self.app_id,
            group_id=self.group_id,
            network=self.network,
            address=app_token.address,
            role=self.role,
            symbol=app_token.symbol,
            decimals=app_token.decimals,
            supply=app_token.supply,
            price=app_token.price,
            price_per_share=app_token.price_per_share,
            underlying=app_token.underlying,
            data_props=data_props,
            display_props=display_props,
        )

    async def _resolve_token(
        self,
        contract: ContractT,
        underlying_address: str,
        multicall: Multicall,
        prices: dict[str, float],
    ) -> AppTokenContext:
        underlying_contract = multicall.wrap(
            self._stages.get_underlying_contract(underlying_address)
        )
        try:
            symbol, decimals, raw_supply, underlying_symbol, underlying_decimals = (
                await gather_reads(
                    contract.symbol(),
                    contract.decimals(),
                    contract.total_supply(),
                    underlying_contract.symbol(),
                    underlying_contract.decimals(),
                )
            )
        except (ContractCallError, MalformedResponseError) as e:
            raise ResolutionError(contract.address, f"token metadata unavailable: {e}") from e

        underlying_price = resolve_price(underlying_symbol, prices, self._token_aliases)
        if underlying_price is None:
            raise ResolutionError(
                contract.address, f"no price for underlying {underlying_symbol}"
            )

        underlying = UnderlyingToken(
            address=underlying_address,
            symbol=underlying_symbol,
            decimals=underlying_decimals,
            price=underlying_price,
        )
        partial = AppTokenContext(
            network=self.network,
            address=contract.address,
            symbol=symbol,
            decimals=decimals,
            supply=raw_supply / 10**decimals,
            price=underlying_price,
            price_per_share=1.0,
            underlying=underlying,
        )
        price_per_share = await self._stages.get_price_per_share(partial)
        return replace(
            partial,
            price=price_per_share * underlying_price,
            price_per_share=price_per_share,
        )
