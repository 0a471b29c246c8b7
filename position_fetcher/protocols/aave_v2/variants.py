"""Role variants of the lending template, one per (market, role) pair."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from eth_utils import is_hex_address

from ...interfaces.lending_variant import LendingVariantSpec
from ...models import ReserveApy, ReserveTokenAddresses, TokenRole


@dataclass(frozen=True)
class LendingVariant:
    """Fixes the provider address, role and the two derivations."""

    role: TokenRole
    provider_address: str
    token_address_of: Callable[[ReserveTokenAddresses], str]
    apy_of: Callable[[ReserveApy], float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "provider_address", _checked_address(self.provider_address))

    @property
    def is_debt(self) -> bool:
        return self.role.is_debt

    def derive_token_address(self, addresses: ReserveTokenAddresses) -> str:
        return self.token_address_of(addresses)

    def derive_apy(self, apy: ReserveApy) -> float:
        return self.apy_of(apy)


def _checked_address(address: str) -> str:
    if not address:
        raise ValueError("Market provider address is empty")
    if not isinstance(address, str) or not is_hex_address(address):
        raise ValueError(f"Market provider address is malformed: {address!r}")
    return address.lower()


def ensure_lending_variant(variant: LendingVariantSpec) -> LendingVariantSpec:
    """Reject, at wiring time, a variant missing any extension point."""
    for method in ("derive_token_address", "derive_apy"):
        if not callable(getattr(variant, method, None)):
            raise TypeError(f"{type(variant).__name__} does not implement {method}()")
    if not isinstance(getattr(variant, "role", None), TokenRole):
        raise TypeError(f"{type(variant).__name__} has no TokenRole 'role'")
    _checked_address(getattr(variant, "provider_address", ""))
    return variant


def supply_variant(provider_address: str) -> LendingVariant:
    return LendingVariant(
        role=TokenRole.SUPPLY,
        provider_address=provider_address,
        token_address_of=lambda addresses: addresses.a_token_address,
        apy_of=lambda apy: apy.supply_apy,
    )


def stable_debt_variant(provider_address: str) -> LendingVariant:
    return LendingVariant(
        role=TokenRole.STABLE_DEBT,
        provider_address=provider_address,
        token_address_of=lambda addresses: addresses.stable_debt_token_address,
        apy_of=lambda apy: apy.stable_borrow_apy,
    )


def variable_debt_variant(provider_address: str) -> LendingVariant:
    return LendingVariant(
        role=TokenRole.VARIABLE_DEBT,
        provider_address=provider_address,
        token_address_of=lambda addresses: addresses.variable_debt_token_address,
        apy_of=lambda apy: apy.variable_borrow_apy,
    )


ROLE_VARIANTS: dict[TokenRole, Callable[[str], LendingVariant]] = {
    TokenRole.SUPPLY: supply_variant,
    TokenRole.STABLE_DEBT: stable_debt_variant,
    TokenRole.VARIABLE_DEBT: variable_debt_variant,
}
