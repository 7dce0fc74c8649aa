"""Shared analytics domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Literal, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

WindowUnit = Literal["h", "d", "m", "y"]
IntervalType = Literal["hour", "day"]


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys and populated by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AggregationStrategy(str, Enum):
    """How trader P&L deltas are combined into one portfolio series."""

    DELTA_WEIGHTED = "delta_weighted"
    CAPITAL_SCALED_EQUITY = "capital_scaled_equity"


class WindowSpec(BaseModel):
    """A lookback window parsed from a ``<count><unit>`` token."""

    count: int
    unit: WindowUnit

    @property
    def interval(self) -> str:
        names = {"h": "hours", "d": "days", "m": "months", "y": "years"}
        return f"{self.count} {names[self.unit]}"

    @property
    def offset(self) -> pd.DateOffset:
        if self.unit == "h":
            return pd.DateOffset(hours=self.count)
        if self.unit == "m":
            return pd.DateOffset(months=self.count)
        if self.unit == "y":
            return pd.DateOffset(years=self.count)
        return pd.DateOffset(days=self.count)

    def window_start(self, now: pd.Timestamp) -> pd.Timestamp:
        return now - self.offset


class RollingWindowConfig(BaseModel):
    """Period count and annualisation for one rolling window token."""

    token: str
    periods: int
    interval_type: IntervalType
    periods_per_year: int

    @property
    def years(self) -> float:
        return self.periods / self.periods_per_year


@dataclass(frozen=True)
class PortfolioSeries:
    """Weighted portfolio series produced by one aggregation strategy.

    ``weighted_pnl`` holds the allocation-weighted dollar delta per day and
    ``changes`` the series fed to the metrics: dollar deltas for the
    delta-weighted strategy, percentage equity changes for the
    capital-scaled strategy. ``equity_curve`` is only set for the latter and
    is one element longer than ``changes``.
    """

    strategy: AggregationStrategy
    days: List[pd.Timestamp] = field(default_factory=list)
    weighted_pnl: List[float] = field(default_factory=list)
    changes: List[float] = field(default_factory=list)
    equity_curve: Optional[List[float]] = None

    @property
    def is_empty(self) -> bool:
        return len(self.changes) == 0


class MetricsResult(CamelModel):
    """Risk and performance metrics for one requested window."""

    window: str
    max_drawdown: float = 0.0
    cagr: float = 0.0
    total_pnl: float = Field(default=0.0, alias="totalPnL")
    sharpe_ratio: Optional[float] = None
    sortino_ratio: Optional[float] = None
    win_rate: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    profit_factor: Optional[float] = None


class RollingSample(CamelModel):
    """Metrics snapshot for one position of a rolling window."""

    start_date: str
    end_date: str
    sharpe: Optional[float] = None
    sortino: Optional[float] = None
    drawdown: float = 0.0
    return_pct: float = 0.0
    win_rate: float = 0.0
    cagr: Optional[float] = 0.0
    cagr_max_dd_ratio: Optional[float] = None
    total_pnl: float = Field(default=0.0, alias="totalPnL")
    avg_win: float = 0.0
    avg_loss: float = 0.0
    profit_factor: Optional[float] = None

    def metric_value(self, key: str) -> Optional[float]:
        """Return the value of a metric by field name or camelCase alias."""

        return getattr(self, resolve_metric(key))


def resolve_metric(key: str) -> str:
    """Map a metric key (field name or camelCase alias) to its RollingSample field."""

    name = METRIC_KEYS.get(key)
    if name is None:
        raise ValueError(f"Unknown metric '{key}'")
    return name


METRIC_KEYS = {
    "sharpe": "sharpe",
    "sortino": "sortino",
    "drawdown": "drawdown",
    "return_pct": "return_pct",
    "returnPct": "return_pct",
    "win_rate": "win_rate",
    "winRate": "win_rate",
    "cagr": "cagr",
    "cagr_max_dd_ratio": "cagr_max_dd_ratio",
    "cagrMaxDdRatio": "cagr_max_dd_ratio",
    "total_pnl": "total_pnl",
    "totalPnL": "total_pnl",
    "avg_win": "avg_win",
    "avgWin": "avg_win",
    "avg_loss": "avg_loss",
    "avgLoss": "avg_loss",
    "profit_factor": "profit_factor",
    "profitFactor": "profit_factor",
}


class HistogramBin(CamelModel):
    """One histogram bin; ``frequency`` is relative to the tallest bin."""

    start: float
    end: float
    count: int
    frequency: float


class DistributionStats(CamelModel):
    """Descriptive statistics for one metric's rolling samples."""

    mean: float
    median: float
    std_dev: float
    skewness: float
    min: float
    max: float


class DistributionSummary(CamelModel):
    """Histogram, fitted normal curve and statistics for one metric."""

    metric: Optional[str] = None
    sample_count: int = 0
    bins: List[HistogramBin] = Field(default_factory=list)
    normal_curve: List[float] = Field(default_factory=list)
    stats: Optional[DistributionStats] = None


class MetricDistribution(CamelModel):
    """Best/worst/percentile table for one metric across rolling windows."""

    best: float = 0.0
    worst: float = 0.0
    average: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    percentile10: float = 0.0
    percentile25: float = 0.0
    percentile75: float = 0.0
    percentile90: float = 0.0
    best_period_start: str = ""
    best_period_end: str = ""
    worst_period_start: str = ""
    worst_period_end: str = ""


class TraderTimeline(CamelModel):
    """First and last observation of one allocated trader."""

    trader_id: str
    first_data_date: str
    last_data_date: str
    percentage: float


class TraderRollingSeries(CamelModel):
    """Rolling samples computed from a single trader's own deltas."""

    trader_id: str
    data: List[RollingSample] = Field(default_factory=list)


class RollingAnalysisResult(CamelModel):
    """Rolling analysis of a portfolio for one window token."""

    window: str
    sample_count: int
    sharpe_ratio: MetricDistribution
    sortino_ratio: MetricDistribution
    max_drawdown: MetricDistribution
    total_return: MetricDistribution
    win_rate: MetricDistribution
    cagr: MetricDistribution
    cagr_max_dd_ratio: MetricDistribution
    time_series: List[RollingSample] = Field(default_factory=list)
    trader_timelines: List[TraderTimeline] = Field(default_factory=list)
    individual_trader_series: List[TraderRollingSeries] = Field(default_factory=list)


__all__ = [
    "CamelModel",
    "AggregationStrategy",
    "WindowSpec",
    "WindowUnit",
    "IntervalType",
    "RollingWindowConfig",
    "PortfolioSeries",
    "MetricsResult",
    "RollingSample",
    "METRIC_KEYS",
    "resolve_metric",
    "HistogramBin",
    "DistributionStats",
    "DistributionSummary",
    "MetricDistribution",
    "TraderTimeline",
    "TraderRollingSeries",
    "RollingAnalysisResult",
]
