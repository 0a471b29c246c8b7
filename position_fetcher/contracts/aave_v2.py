"""Aave v2 contract handles and the factory that builds them."""
from __future__ import annotations

from typing import Any

from ..chains.evm.abi import ContractFunction
from ..chains.evm.toolkit import EvmToolkit
from .base import Contract
from .erc20 import Erc20


class AaveV2AToken(Erc20):
    """aToken, stable-debt or variable-debt token; all expose the underlying."""

    UNDERLYING_ASSET_ADDRESS = ContractFunction(
        "UNDERLYING_ASSET_ADDRESS", outputs=(("underlying", "address"),)
    )

    async def underlying_asset_address(self) -> str:
        return (await self._read(self.UNDERLYING_ASSET_ADDRESS))["underlying"]


class AaveProtocolDataProvider(Contract):
    GET_ALL_RESERVES_TOKENS = ContractFunction(
        "getAllReservesTokens", outputs=(("reserves", "(string,address)[]"),)
    )
    GET_RESERVE_TOKENS_ADDRESSES = ContractFunction(
        "getReserveTokensAddresses",
        inputs=("address",),
        outputs=(
            ("aTokenAddress", "address"),
            ("stableDebtTokenAddress", "address"),
            ("variableDebtTokenAddress", "address"),
        ),
    )
    GET_RESERVE_DATA = ContractFunction(
        "getReserveData",
        inputs=("address",),
        outputs=(
            ("availableLiquidity", "uint256"),
            ("totalStableDebt", "uint256"),
            ("totalVariableDebt", "uint256"),
            ("liquidityRate", "uint256"),
            ("variableBorrowRate", "uint256"),
            ("stableBorrowRate", "uint256"),
            ("averageStableBorrowRate", "uint256"),
            ("liquidityIndex", "uint256"),
            ("variableBorrowIndex", "uint256"),
            ("lastUpdateTimestamp", "uint40"),
        ),
    )
    GET_RESERVE_CONFIGURATION_DATA = ContractFunction(
        "getReserveConfigurationData",
        inputs=("address",),
        outputs=(
            ("decimals", "uint256"),
            ("ltv", "uint256"),
            ("liquidationThreshold", "uint256"),
            ("liquidationBonus", "uint256"),
            ("reserveFactor", "uint256"),
            ("usageAsCollateralEnabled", "bool"),
            ("borrowingEnabled", "bool"),
            ("stableBorrowRateEnabled", "bool"),
            ("isActive", "bool"),
            ("isFrozen", "bool"),
        ),
    )

    async def get_all_reserves_tokens(self) -> list[dict[str, str]]:
        """``[{"symbol": ..., "tokenAddress": ...}, ...]`` in provider order."""
        result = await self._read(self.GET_ALL_RESERVES_TOKENS)
        return [
            {"symbol": symbol, "tokenAddress": token_address}
            for symbol, token_address in result["reserves"]
        ]

    async def get_reserve_tokens_addresses(self, asset: str) -> dict[str, Any]:
        return await self._read(self.GET_RESERVE_TOKENS_ADDRESSES, asset)

    async def get_reserve_data(self, asset: str) -> dict[str, Any]:
        return await self._read(self.GET_RESERVE_DATA, asset)

    async def get_reserve_configuration_data(self, asset: str) -> dict[str, Any]:
        return await self._read(self.GET_RESERVE_CONFIGURATION_DATA, asset)


class AaveV2ContractFactory:
    """Builds Aave v2 contract handles by (network, address).

    Products that reuse Aave v2 infrastructure share the same factory
    instance. The factory itself holds no fetch state; the only mutable state
    behind it is each ``EvmClient``'s preferred endpoint, which belongs to the
    chain access layer and is shared by every product on that network.
    """

    def __init__(self, toolkit: EvmToolkit) -> None:
        self.toolkit = toolkit

    def aave_protocol_data_provider(self, network: str, address: str) -> AaveProtocolDataProvider:
        return AaveProtocolDataProvider(address, self.toolkit.client(network))

    def aave_v2_a_token(self, network: str, address: str) -> AaveV2AToken:
        return AaveV2AToken(address, self.toolkit.client(network))

    def erc20(self, network: str, address: str) -> Erc20:
        return Erc20(address, self.toolkit.client(network))
