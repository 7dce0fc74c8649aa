"""Combine per-trader delta series into one weighted portfolio series."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Protocol, Sequence

import pandas as pd

from pnl_lab.backend.core.analytics.models import AggregationStrategy, PortfolioSeries

logger = logging.getLogger(__name__)

REFERENCE_CAPITAL = 1_000_000.0


class AllocationLike(Protocol):
    trader_address: str
    percentage: float


def weight_map(allocations: Iterable[AllocationLike]) -> Dict[str, float]:
    """Map lower-cased trader ids to percentage weights.

    Percentages are not renormalised; repeated entries for one trader add up.
    """

    weights: Dict[str, float] = {}
    for allocation in allocations:
        key = allocation.trader_address.strip().lower()
        weights[key] = weights.get(key, 0.0) + float(allocation.percentage)
    return weights


def percent_changes(equity_curve: Sequence[float]) -> List[float]:
    """Percentage change between consecutive equity values, 0 where the previous value is 0."""

    changes: List[float] = []
    for prev, curr in zip(equity_curve[:-1], equity_curve[1:]):
        changes.append((curr / prev - 1.0) * 100.0 if prev != 0 else 0.0)
    return changes


class PortfolioAggregator:
    """Weight trader deltas by allocation and build the portfolio change series."""

    def __init__(self, reference_capital: float = REFERENCE_CAPITAL) -> None:
        if reference_capital <= 0:
            raise ValueError("reference_capital must be positive")
        self.reference_capital = reference_capital

    @staticmethod
    def weighted_pnl(deltas: Mapping[str, pd.Series], weights: Mapping[str, float]) -> pd.Series:
        """Sum ``delta * percentage / 100`` per day across the traders present that day.

        Days where no allocated trader has a delta are absent from the result.
        """

        parts = [series * (weights[trader_id] / 100.0) for trader_id, series in deltas.items() if trader_id in weights]
        parts = [part for part in parts if not part.empty]
        if not parts:
            return pd.Series(dtype=float)
        combined = pd.concat(parts)
        return combined.groupby(level=0).sum().sort_index()

    def aggregate(
        self,
        deltas: Mapping[str, pd.Series],
        allocations: Iterable[AllocationLike],
        strategy: AggregationStrategy,
        initial_capital: float,
    ) -> PortfolioSeries:
        """Build the portfolio series for the requested strategy."""

        strategy = AggregationStrategy(strategy)
        weighted = self.weighted_pnl(deltas, weight_map(allocations))
        if strategy is AggregationStrategy.DELTA_WEIGHTED:
            series = self.delta_series(weighted)
        else:
            series = self.equity_series(weighted, initial_capital)
        logger.debug("Portfolio aggregated | strategy=%s days=%d", strategy.value, len(series.days))
        return series

    @staticmethod
    def delta_series(weighted: pd.Series) -> PortfolioSeries:
        """Delta-weighted strategy: the change series is the weighted dollar delta itself."""

        values = [float(v) for v in weighted.to_numpy()]
        return PortfolioSeries(
            strategy=AggregationStrategy.DELTA_WEIGHTED,
            days=list(weighted.index),
            weighted_pnl=values,
            changes=list(values),
        )

    def equity_series(self, weighted: pd.Series, initial_capital: float) -> PortfolioSeries:
        """Capital-scaled strategy: scale deltas to ``initial_capital`` and compound an equity curve.

        The tracked traders are assumed to run on ``reference_capital``, so each
        weighted delta is multiplied by ``initial_capital / reference_capital``
        before being added to the running equity.
        """

        scale = initial_capital / self.reference_capital
        values = [float(v) for v in weighted.to_numpy()]
        equity = float(initial_capital)
        curve = [equity]
        for pnl in values:
            equity += pnl * scale
            curve.append(equity)
        return PortfolioSeries(
            strategy=AggregationStrategy.CAPITAL_SCALED_EQUITY,
            days=list(weighted.index),
            weighted_pnl=values,
            changes=percent_changes(curve),
            equity_curve=curve,
        )


__all__ = ["REFERENCE_CAPITAL", "AllocationLike", "weight_map", "percent_changes", "PortfolioAggregator"]
