"""Aave v2 app."""
from .module import AAVE_V2_APP_ID, AaveV2AppModule

__all__ = ["AAVE_V2_APP_ID", "AaveV2AppModule"]
