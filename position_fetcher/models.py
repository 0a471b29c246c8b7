"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import PositionFetchError, PositionFetcherError


class TokenRole(str, Enum):
    """Which side of a reserve a token represents."""

    SUPPLY = "supply"
    STABLE_DEBT = "stable-debt"
    VARIABLE_DEBT = "variable-debt"

    @property
    def is_debt(self) -> bool:
        return self is not TokenRole.SUPPLY


@dataclass(frozen=True)
class ReserveTokenAddresses:
    """The three token contracts of one reserve, lower-cased."""

    a_token_address: str
    stable_debt_token_address: str
    variable_debt_token_address: str


@dataclass(frozen=True)
class ReserveApy:
    supply_apy: float
    variable_borrow_apy: float
    stable_borrow_apy: float


@dataclass(frozen=True)
class ReserveConfiguration:
    enabled_as_collateral: bool
    liquidation_threshold: float


@dataclass(frozen=True)
class UnderlyingToken:
    """The asset backing an app token."""

    address: str
    symbol: str
    decimals: int
    price: float


@dataclass(frozen=True)
class LendingTokenDataProps:
    apy: float
    enabled_as_collateral: bool
    liquidity: float
    liquidation_threshold: float
    is_active: bool


@dataclass(frozen=True)
class DisplayProps:
    label: str
    label_detailed: str


@dataclass(frozen=True)
class AppTokenPosition:
    """One tracked token contract and its derived snapshot."""

    app_id: str
    group_id: str
    network: str
    address: str
    role: TokenRole
    symbol: str
    decimals: int
    supply: float
    price: float
    price_per_share: float
    underlying: UnderlyingToken
    data_props: LendingTokenDataProps
    display_props: DisplayProps

    def to_dict(self) -> dict[str, Any]:
        """Render the flat output record consumed by presentation layers."""
        return {
            "appId": self.app_id,
            "groupId": self.group_id,
            "address": self.address,
            "network": self.network,
            "role": self.role.value,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "supply": self.supply,
            "price": self.price,
            "underlyingAssetAddress": self.underlying.address,
            "apy": self.data_props.apy,
            "enabledAsCollateral": self.data_props.enabled_as_collateral,
            "liquidationThreshold": self.data_props.liquidation_threshold,
            "liquidity": self.data_props.liquidity,
            "isActive": self.data_props.is_active,
            "label": self.display_props.label,
            "labelDetailed": self.display_props.label_detailed,
        }


@dataclass(frozen=True)
class PositionFailure:
    """A position that was dropped from a fetch cycle, and why."""

    address: str
    error: PositionFetchError


@dataclass(frozen=True)
class PositionFetchResult:
    """Outcome of one fetch cycle for one market and role."""

    positions: tuple[AppTokenPosition, ...] = ()
    failures: tuple[PositionFailure, ...] = ()


@dataclass(frozen=True)
class TokenBalance:
    """A wallet's holding of one app token; ``balance_usd`` is signed."""

    position: AppTokenPosition
    balance: float
    balance_usd: float


@dataclass(frozen=True)
class MarketFailure:
    """A market whose discovery failed; it contributed no positions."""

    app_id: str
    group_id: str
    network: str
    market_address: str
    error: PositionFetcherError


@dataclass(frozen=True)
class PositionReport:
    """Positions across every fetched market, with what was dropped."""

    positions: tuple[AppTokenPosition, ...] = ()
    failures: tuple[PositionFailure, ...] = ()
    market_failures: tuple[MarketFailure, ...] = ()
