"""Protocol interfaces for the position fetcher."""
from .chain import ContractReader
from .lending_variant import LendingVariantSpec
from .price_oracle import PriceOracle
from .protocol_adapter import PositionFetcher

__all__ = ["ContractReader", "LendingVariantSpec", "PositionFetcher", "PriceOracle"]
