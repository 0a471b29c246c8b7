"""Lending variant protocol — the extension points of the lending template."""
from typing import Protocol

from ..models import ReserveApy, ReserveTokenAddresses, TokenRole


class LendingVariantSpec(Protocol):
    """What a (market, role) binding supplies to the lending template."""

    @property
    def role(self) -> TokenRole: ...

    @property
    def provider_address(self) -> str: ...

    def derive_token_address(self, addresses: ReserveTokenAddresses) -> str: ...

    def derive_apy(self, apy: ReserveApy) -> float: ...
