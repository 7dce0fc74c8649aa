"""Central settings for the P&L Lab backend."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class CalculatorSettings:
    """Holds filesystem locations and calculator defaults."""

    project_root: Path = Path(__file__).resolve().parents[2]
    config_root: Path = project_root / "configs" / "calculator"
    data_root: Path = project_root / "data"
    default_initial_capital: float = 100_000.0
    reference_capital: float = 1_000_000.0
    default_bin_count: int = 25
    trading_periods_per_year: int = 252
    hourly_periods_per_year: int = 24 * 365
    cagr_cap: float = 99999.0

    @property
    def observations_csv(self) -> Path:
        return self.data_root / "pnl_snapshots.csv"


def get_settings() -> CalculatorSettings:
    """Return calculator backend settings."""

    return CalculatorSettings()


__all__ = ["CalculatorSettings", "get_settings"]
