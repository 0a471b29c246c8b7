"""Aave v2 lending template, role variants and reserve adapters."""
from .balances import LendingBalanceFetcher
from .lending_template import (
    AaveV2LendingTemplateTokenFetcher,
    build_lending_fetchers,
    signed_liquidity,
)
from .variants import (
    LendingVariant,
    ensure_lending_variant,
    stable_debt_variant,
    supply_variant,
    variable_debt_variant,
)

__all__ = [
    "AaveV2LendingTemplateTokenFetcher",
    "LendingBalanceFetcher",
    "LendingVariant",
    "build_lending_fetchers",
    "ensure_lending_variant",
    "signed_liquidity",
    "stable_debt_variant",
    "supply_variant",
    "variable_debt_variant",
]
