"""Error taxonomy for the position fetcher."""
from __future__ import annotations


class PositionFetcherError(Exception):
    """Base class for all fetcher errors."""


class ContractCallError(PositionFetcherError):
    """A contract read reverted, failed inside a batch, or the RPC failed."""

    def __init__(self, address: str, function: str, reason: str) -> None:
        super().__init__(f"{function} on {address} failed: {reason}")
        self.address = address
        self.function = function
        self.reason = reason


class MalformedResponseError(PositionFetcherError):
    """A response could not be interpreted (missing field, wrong type)."""


class DiscoveryError(PositionFetcherError):
    """Reserve enumeration or token-address resolution failed for a market."""

    def __init__(self, network: str, provider_address: str, reason: str) -> None:
        super().__init__(
            f"Discovery failed for market {provider_address} on {network}: {reason}"
        )
        self.network = network
        self.provider_address = provider_address


class PositionFetchError(PositionFetcherError):
    """Failure confined to a single position."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"{address}: {reason}")
        self.address = address
        self.reason = reason


class ResolutionError(PositionFetchError):
    """Underlying asset, token metadata or price could not be resolved."""


class DataFetchError(PositionFetchError):
    """Reserve APY or configuration read failed."""
