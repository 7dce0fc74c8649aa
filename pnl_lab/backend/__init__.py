"""Backend package for the P&L Lab calculator service."""

from pnl_lab.backend.settings import get_settings, CalculatorSettings

__all__ = ["get_settings", "CalculatorSettings"]
