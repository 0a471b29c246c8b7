"""Pure mapping functions for Aave v2 reserve data — no I/O."""
from __future__ import annotations

from typing import Any, Mapping

from ...errors import MalformedResponseError
from ...models import ReserveApy, ReserveConfiguration, ReserveTokenAddresses

RAY = 10**27
LIQUIDATION_THRESHOLD_SCALE = 10**4


def _field(raw: Mapping[str, Any], name: str) -> Any:
    try:
        value = raw[name]
    except (KeyError, TypeError) as e:
        raise MalformedResponseError(f"Missing field '{name}' in {raw!r}") from e
    if value is None:
        raise MalformedResponseError(f"Field '{name}' is null")
    return value


def _address(raw: Mapping[str, Any], name: str) -> str:
    value = _field(raw, name)
    if not isinstance(value, str):
        raise MalformedResponseError(f"Field '{name}' is not an address: {value!r}")
    return value.lower()


def _integer(raw: Mapping[str, Any], name: str) -> int:
    """Accept ints and decimal strings; reject bools, floats and junk."""
    value = _field(raw, name)
    if isinstance(value, bool):
        raise MalformedResponseError(f"Field '{name}' is not numeric: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 10)
        except ValueError as e:
            raise MalformedResponseError(f"Field '{name}' is not numeric: {value!r}") from e
    raise MalformedResponseError(f"Field '{name}' is not numeric: {value!r}")


def to_reserve_token_addresses(raw: Mapping[str, Any]) -> ReserveTokenAddresses:
    """Lower-case the three token addresses of a reserve."""
    return ReserveTokenAddresses(
        a_token_address=_address(raw, "aTokenAddress"),
        stable_debt_token_address=_address(raw, "stableDebtTokenAddress"),
        variable_debt_token_address=_address(raw, "variableDebtTokenAddress"),
    )


def to_reserve_apy(raw: Mapping[str, Any]) -> ReserveApy:
    """Convert ray-precision rates to plain fractions.

    ``supply_apy = liquidityRate / 10^27`` and likewise for both borrow rates.
    """
    return ReserveApy(
        supply_apy=_integer(raw, "liquidityRate") / RAY,
        variable_borrow_apy=_integer(raw, "variableBorrowRate") / RAY,
        stable_borrow_apy=_integer(raw, "stableBorrowRate") / RAY,
    )


def to_reserve_configuration(raw: Mapping[str, Any]) -> ReserveConfiguration:
    """Scale the liquidation threshold to a fraction; pass the collateral flag."""
    enabled = _field(raw, "usageAsCollateralEnabled")
    if not isinstance(enabled, bool):
        raise MalformedResponseError(
            f"Field 'usageAsCollateralEnabled' is not a boolean: {enabled!r}"
        )
    return ReserveConfiguration(
        enabled_as_collateral=enabled,
        liquidation_threshold=_integer(raw, "liquidationThreshold")
        / LIQUIDATION_THRESHOLD_SCALE,
    )
