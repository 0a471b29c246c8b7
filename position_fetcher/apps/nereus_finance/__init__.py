"""Nereus Finance app."""
from .module import NEREUS_FINANCE_APP_ID, NereusFinanceAppModule

__all__ = ["NEREUS_FINANCE_APP_ID", "NereusFinanceAppModule"]
