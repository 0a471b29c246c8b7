"""Normalized supply and debt positions for Aave-v2-style lending markets."""
from .errors import (
    ContractCallError,
    DataFetchError,
    DiscoveryError,
    MalformedResponseError,
    PositionFetchError,
    PositionFetcherError,
    ResolutionError,
)
from .models import AppTokenPosition, PositionFetchResult, TokenRole

__all__ = [
    "AppTokenPosition",
    "ContractCallError",
    "DataFetchError",
    "DiscoveryError",
    "MalformedResponseError",
    "PositionFetchError",
    "PositionFetchResult",
    "PositionFetcherError",
    "ResolutionError",
    "TokenRole",
]
