"""Request and response models for the portfolio calculator."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from pnl_lab.backend.core.analytics.models import (
    AggregationStrategy,
    CamelModel,
    MetricsResult,
    RollingSample,
)


class AllocationInput(CamelModel):
    """Percentage of the hypothetical portfolio given to one trader."""

    trader_address: str
    percentage: float


class CalculatorRequest(CamelModel):
    """Metrics for a set of allocations over one or more lookback windows."""

    allocations: List[AllocationInput] = Field(default_factory=list)
    windows: List[str] = Field(default_factory=list)
    initial_capital: Optional[float] = None
    strategy: AggregationStrategy = AggregationStrategy.CAPITAL_SCALED_EQUITY


class CalculatorResponse(CamelModel):
    """One MetricsResult per requested window, in request order."""

    metrics: List[MetricsResult] = Field(default_factory=list)


class RollingRequest(CamelModel):
    """Rolling analysis of a set of allocations for one window token."""

    allocations: List[AllocationInput] = Field(default_factory=list)
    window: Optional[str] = None
    initial_capital: Optional[float] = None
    step: int = Field(default=1, gt=0)


class DistributionRequest(CamelModel):
    """Histogram request over previously computed rolling samples."""

    samples: List[RollingSample] = Field(default_factory=list)
    metric: str = "sharpe"
    bin_count: Optional[int] = Field(default=None, gt=0)


__all__ = [
    "AllocationInput",
    "CalculatorRequest",
    "CalculatorResponse",
    "RollingRequest",
    "DistributionRequest",
]
