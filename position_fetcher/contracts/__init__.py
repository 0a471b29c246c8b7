"""Contract handles."""
from .aave_v2 import AaveProtocolDataProvider, AaveV2AToken, AaveV2ContractFactory
from .base import Contract
from .erc20 import Erc20

__all__ = [
    "AaveProtocolDataProvider",
    "AaveV2AToken",
    "AaveV2ContractFactory",
    "Contract",
    "Erc20",
]
