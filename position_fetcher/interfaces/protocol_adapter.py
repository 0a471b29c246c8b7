"""Position fetcher protocol — one market and role per fetcher."""
from typing import Protocol

from ..models import PositionFetchResult, TokenRole


class PositionFetcher(Protocol):
    """Abstract interface for fetching app-token positions of one market."""

    @property
    def app_id(self) -> str: ...

    @property
    def group_id(self) -> str: ...

    @property
    def network(self) -> str: ...

    @property
    def role(self) -> TokenRole: ...

    @property
    def market_address(self) -> str: ...

    async def fetch_positions(self, prices: dict[str, float]) -> PositionFetchResult: ...
