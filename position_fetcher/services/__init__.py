"""Service modules"""
from .position_service import PositionService

__all__ = ["PositionService"]
