"""Aave v2 lending template — the stages shared by every role and market."""
from __future__ import annotations

import logging

from ...chains.evm.multicall import Multicall, gather_reads
from ...contracts.aave_v2 import (
    AaveProtocolDataProvider,
    AaveV2AToken,
    AaveV2ContractFactory,
)
from ...contracts.erc20 import Erc20
from ...errors import (
    ContractCallError,
    DataFetchError,
    DiscoveryError,
    MalformedResponseError,
    ResolutionError,
)
from ...interfaces.lending_variant import LendingVariantSpec
from ...models import LendingTokenDataProps, ReserveConfiguration, TokenRole
from ...template.app_token import AppTokenContext, AppTokenTemplatePositionFetcher
from .reserve import to_reserve_apy, to_reserve_configuration, to_reserve_token_addresses
from .variants import ROLE_VARIANTS, ensure_lending_variant

logger = logging.getLogger(__name__)

_READ_ERRORS = (ContractCallError, MalformedResponseError)


def signed_liquidity(is_debt: bool, price: float, supply: float) -> float:
    """Supply-side liquidity is positive, debt-side negative. Zero is never signed."""
    return (-1 if is_debt else 1) * price * supply or 0.0


class AaveV2LendingTemplateTokenFetcher:
    """Stage set for one lending variant on one network.

    Everything role-specific comes from ``variant``; the contract factory is
    the only other collaborator and may be shared across products.
    """

    def __init__(
        self,
        app_id: str,
        network: str,
        variant: LendingVariantSpec,
        contract_factory: AaveV2ContractFactory,
    ) -> None:
        self.app_id = app_id
        self.network = network
        self.variant = ensure_lending_variant(variant)
        self._contract_factory = contract_factory

    @property
    def group_id(self) -> str:
        return self.variant.role.value

    @property
    def role(self) -> TokenRole:
        return self.variant.role

    @property
    def market_address(self) -> str:
        return self.variant.provider_address

    def get_contract(self, address: str) -> AaveV2AToken:
        return self._contract_factory.aave_v2_a_token(self.network, address)

    def get_underlying_contract(self, address: str) -> Erc20:
        return self._contract_factory.erc20(self.network, address)

    def _data_provider(self, multicall: Multicall) -> AaveProtocolDataProvider:
        return multicall.wrap(
            self._contract_factory.aave_protocol_data_provider(
                self.network, self.variant.provider_address
            )
        )

    async def get_addresses(self, multicall: Multicall) -> list[str]:
        """Tracked token address of every reserve, in provider order."""
        pool = self._data_provider(multicall)
        try:
            reserve_tokens = await pool.get_all_reserves_tokens()
            reserve_token_addresses = [token["tokenAddress"] for token in reserve_tokens]
            reserve_tokens_data = await gather_reads(
                *(pool.get_reserve_tokens_addresses(r) for r in reserve_token_addresses)
            )
            return [
                self.variant.derive_token_address(to_reserve_token_addresses(data))
                for data in reserve_tokens_data
            ]
        except _READ_ERRORS as e:
            raise DiscoveryError(self.network, self.variant.provider_address, str(e)) from e

    async def get_underlying_token_address(self, contract: AaveV2AToken) -> str:
        try:
            underlying = await contract.underlying_asset_address()
        except _READ_ERRORS as e:
            raise ResolutionError(contract.address, f"underlying asset unavailable: {e}") from e
        return underlying.lower()

    async def get_price_per_share(self, app_token: AppTokenContext) -> float:
        # a/debt tokens track the underlying 1:1
        return 1.0

    async def get_reserve_apy(self, app_token: AppTokenContext, multicall: Multicall) -> float:
        pool = self._data_provider(multicall)
        reserve_data = await pool.get_reserve_data(app_token.underlying.address)
        return self.variant.derive_apy(to_reserve_apy(reserve_data))

    async def get_reserve_configuration_data(
        self, app_token: AppTokenContext, multicall: Multicall
    ) -> ReserveConfiguration:
        pool = self._data_provider(multicall)
        configuration = await pool.get_reserve_configuration_data(app_token.underlying.address)
        return to_reserve_configuration(configuration)

    async def get_data_props(
        self, app_token: AppTokenContext, multicall: Multicall
    ) -> LendingTokenDataProps:
        try:
            apy, reserve_config = await gather_reads(
                self.get_reserve_apy(app_token, multicall),
                self.get_reserve_configuration_data(app_token, multicall),
            )
        except _READ_ERRORS as e:
            raise DataFetchError(app_token.address, f"reserve data unavailable: {e}") from e

        liquidity = signed_liquidity(self.variant.role.is_debt, app_token.price, app_token.supply)
        return LendingTokenDataProps(
            apy=apy,
            enabled_as_collateral=reserve_config.enabled_as_collateral,
            liquidity=liquidity,
            liquidation_threshold=reserve_config.liquidation_threshold,
            is_active=abs(liquidity) > 0,
        )

    async def get_label(self, app_token: AppTokenContext) -> str:
        return app_token.underlying.symbol

    async def get_label_detailed(self, app_token: AppTokenContext) -> str:
        return app_token.symbol


def build_lending_fetchers(
    app_id: str,
    network: str,
    provider_address: str,
    contract_factory: AaveV2ContractFactory,
    token_aliases: dict[str, str] | None = None,
    label: str = "",
) -> tuple[AppTokenTemplatePositionFetcher, ...]:
    """Supply, stable-debt and variable-debt fetchers for one market."""
    fetchers = tuple(
        AppTokenTemplatePositionFetcher(
            AaveV2LendingTemplateTokenFetcher(
                app_id, network, make_variant(provider_address), contract_factory
            ),
            contract_factory.toolkit,
            token_aliases,
        )
        for make_variant in ROLE_VARIANTS.values()
    )
    logger.debug(
        "Bound %s market %s (%s) on %s (%d roles)",
        app_id, label or "unlabelled", provider_address, network, len(fetchers),
    )
    return fetchers
