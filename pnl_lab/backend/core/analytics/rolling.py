"""Rolling-window analysis over a portfolio's period P&L history."""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from pnl_lab.backend.core.analytics.aggregator import REFERENCE_CAPITAL, PortfolioAggregator
from pnl_lab.backend.core.analytics.aligner import TimeSeriesAligner
from pnl_lab.backend.core.analytics.metrics import MetricsCalculator
from pnl_lab.backend.core.analytics.models import (
    MetricDistribution,
    RollingSample,
    RollingWindowConfig,
    resolve_metric,
)
from pnl_lab.backend.core.errors import InsufficientDataError
from pnl_lab.backend.core.observations.models import Observation
from pnl_lab.backend.core.utils.datetime import format_period

logger = logging.getLogger(__name__)

# Drawdowns at or below this many percent are too shallow for a CAGR/drawdown ratio.
MIN_DRAWDOWN_FOR_RATIO = 0.1


class RollingWindowAnalyzer:
    """Slide a fixed-length window across a weighted P&L history.

    Each window position gets its own equity curve seeded at the initial
    capital, so windows never depend on one another.
    """

    def __init__(self, reference_capital: float = REFERENCE_CAPITAL) -> None:
        self.aggregator = PortfolioAggregator(reference_capital=reference_capital)

    def iter_samples(
        self,
        weighted_pnl: pd.Series,
        config: RollingWindowConfig,
        initial_capital: float,
        step: int = 1,
    ) -> Iterator[RollingSample]:
        """Lazily yield one sample per full window, oldest first.

        Args:
            weighted_pnl: Weighted P&L per period, indexed by period start and ascending.
            config: Window length and annualisation.
            initial_capital: Capital each window's equity curve starts from.
            step: Number of periods between consecutive window ends.
        """

        if config.periods <= 0:
            raise ValueError("window must be positive")
        if step <= 0:
            raise ValueError("step must be positive")

        calculator = MetricsCalculator(periods_per_year=config.periods_per_year)
        periods = config.periods
        for end in range(periods - 1, len(weighted_pnl), step):
            start = end - periods + 1
            window_slice = weighted_pnl.iloc[start : end + 1]
            series = self.aggregator.equity_series(window_slice, initial_capital)
            metrics = calculator.compute(config.token, series, initial_capital, rolling_years=config.years)

            final_equity = series.equity_curve[-1] if series.equity_curve else initial_capital
            return_pct = (final_equity - initial_capital) / initial_capital * 100.0 if initial_capital else 0.0
            cagr: Optional[float] = metrics.cagr if math.isfinite(metrics.cagr) else None
            magnitude = abs(metrics.max_drawdown)
            ratio = cagr / magnitude if cagr is not None and magnitude > MIN_DRAWDOWN_FOR_RATIO else None

            yield RollingSample(
                start_date=format_period(weighted_pnl.index[start], config.interval_type),
                end_date=format_period(weighted_pnl.index[end], config.interval_type),
                sharpe=metrics.sharpe_ratio,
                sortino=metrics.sortino_ratio,
                drawdown=metrics.max_drawdown,
                return_pct=return_pct,
                win_rate=metrics.win_rate,
                cagr=cagr,
                cagr_max_dd_ratio=ratio,
                total_pnl=metrics.total_pnl,
                avg_win=metrics.avg_win,
                avg_loss=metrics.avg_loss,
                profit_factor=metrics.profit_factor,
            )

    def analyze(
        self,
        weighted_pnl: pd.Series,
        config: RollingWindowConfig,
        initial_capital: float,
        step: int = 1,
    ) -> List[RollingSample]:
        """Materialise :meth:`iter_samples`, failing when the history is shorter than the window."""

        if len(weighted_pnl) < config.periods:
            raise InsufficientDataError(config.periods, len(weighted_pnl), config.interval_type)
        samples = list(self.iter_samples(weighted_pnl, config, initial_capital, step=step))
        logger.info("Rolling analysis done | window=%s periods=%d samples=%d", config.token, len(weighted_pnl), len(samples))
        return samples

    def analyze_many(
        self,
        observations: Sequence[Observation],
        weights: Mapping[str, float],
        configs: Sequence[RollingWindowConfig],
        initial_capital: float,
        step: int = 1,
    ) -> List[Tuple[RollingWindowConfig, List[RollingSample]]]:
        """Run independent analyses for several windows, in request order.

        Observations are bucketed at each window's own resolution, so hour
        and day windows can be mixed in one call. Each resolution is
        aligned once and shared by the windows that use it.
        """

        weighted_by_interval: Dict[str, pd.Series] = {}
        runs: List[Tuple[RollingWindowConfig, List[RollingSample]]] = []
        for config in configs:
            weighted = weighted_by_interval.get(config.interval_type)
            if weighted is None:
                deltas = TimeSeriesAligner(resolution=config.interval_type).align_deltas(observations)
                weighted = self.aggregator.weighted_pnl(deltas, weights)
                weighted_by_interval[config.interval_type] = weighted
            runs.append((config, self.analyze(weighted, config, initial_capital, step=step)))
        return runs


def summarize_metric_distribution(samples: Sequence[RollingSample], key: str) -> MetricDistribution:
    """Best/worst/percentile table for one metric across rolling samples.

    ``None`` values are skipped. The median averages the two middle values
    for an even count; percentiles take the sorted value at ``floor(p * (n - 1))``.
    Best and worst periods are the first samples that reach those values.
    """

    resolve_metric(key)
    tagged = [(sample, sample.metric_value(key)) for sample in samples]
    tagged = [(sample, value) for sample, value in tagged if value is not None]
    if not tagged:
        return MetricDistribution()

    values = np.asarray([value for _, value in tagged], dtype=float)
    ordered = np.sort(values)
    n = ordered.size
    best = float(np.max(values))
    worst = float(np.min(values))
    if n % 2 == 0:
        median = float((ordered[n // 2 - 1] + ordered[n // 2]) / 2.0)
    else:
        median = float(ordered[n // 2])

    def percentile(p: float) -> float:
        return float(ordered[int(math.floor(p * (n - 1)))])

    best_sample = next(sample for sample, value in tagged if value == best)
    worst_sample = next(sample for sample, value in tagged if value == worst)

    return MetricDistribution(
        best=best,
        worst=worst,
        average=float(np.mean(values)),
        median=median,
        std_dev=float(np.std(values)),
        percentile10=percentile(0.1),
        percentile25=percentile(0.25),
        percentile75=percentile(0.75),
        percentile90=percentile(0.9),
        best_period_start=best_sample.start_date,
        best_period_end=best_sample.end_date,
        worst_period_start=worst_sample.start_date,
        worst_period_end=worst_sample.end_date,
    )


__all__ = ["MIN_DRAWDOWN_FOR_RATIO", "RollingWindowAnalyzer", "summarize_metric_distribution"]
