"""Unit tests for data models."""
from __future__ import annotations

import pytest

from position_fetcher.errors import DataFetchError, PositionFetchError, ResolutionError
from position_fetcher.models import (
    AppTokenPosition,
    PositionFailure,
    PositionFetchResult,
    PositionReport,
    ReserveApy,
    TokenRole,
)


class TestTokenRole:
    def test_values(self) -> None:
        assert TokenRole.SUPPLY.value == "supply"
        assert TokenRole.STABLE_DEBT.value == "stable-debt"
        assert TokenRole.VARIABLE_DEBT.value == "variable-debt"

    def test_is_debt(self) -> None:
        assert not TokenRole.SUPPLY.is_debt
        assert TokenRole.STABLE_DEBT.is_debt
        assert TokenRole.VARIABLE_DEBT.is_debt

    def test_from_value(self) -> None:
        assert TokenRole("variable-debt") is TokenRole.VARIABLE_DEBT


class TestAppTokenPosition:
    def test_to_dict(self, sample_position: AppTokenPosition) -> None:
        d = sample_position.to_dict()
        assert d["appId"] == "aave-v2"
        assert d["groupId"] == "variable-debt"
        assert d["role"] == "variable-debt"
        assert d["underlyingAssetAddress"] == sample_position.underlying.address
        assert d["liquidity"] == pytest.approx(-200.0)
        assert d["liquidationThreshold"] == pytest.approx(0.88)
        assert d["isActive"] is True
        assert d["label"] == "USDC"
        assert d["labelDetailed"] == "variableDebtUSDC"

    def test_to_dict_is_flat(self, sample_position: AppTokenPosition) -> None:
        d = sample_position.to_dict()
        assert all(not isinstance(v, (dict, list, tuple)) for v in d.values())

    def test_immutable(self, sample_position: AppTokenPosition) -> None:
        with pytest.raises(AttributeError):
            sample_position.price = 0.0  # type: ignore[misc]


class TestResults:
    def test_defaults_empty(self) -> None:
        assert PositionFetchResult().positions == ()
        assert PositionReport().market_failures == ()

    def test_failure_keeps_error(self) -> None:
        err = DataFetchError("0xabc", "reserve data unavailable")
        failure = PositionFailure(address="0xabc", error=err)
        assert isinstance(failure.error, PositionFetchError)
        assert "reserve data unavailable" in str(failure.error)

    def test_error_hierarchy(self) -> None:
        assert issubclass(ResolutionError, PositionFetchError)
        assert issubclass(DataFetchError, PositionFetchError)

    def test_reserve_apy_immutable(self) -> None:
        apy = ReserveApy(supply_apy=0.01, variable_borrow_apy=0.02, stable_borrow_apy=0.03)
        with pytest.raises(AttributeError):
            apy.supply_apy = 1.0  # type: ignore[misc]
