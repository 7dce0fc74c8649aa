"""Risk and performance metrics for a single window."""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from pnl_lab.backend.core.analytics.models import AggregationStrategy, MetricsResult, PortfolioSeries

logger = logging.getLogger(__name__)

TRADING_PERIODS_PER_YEAR = 252
DAYS_PER_YEAR = 365
CAGR_CAP = 99999.0
_ZERO_STD_TOL = 1e-12


def compute_win_rate(changes: Sequence[float]) -> float:
    """Share of strictly positive changes, in percent."""

    arr = np.asarray(changes, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.count_nonzero(arr > 0)) / float(arr.size) * 100.0


def compute_avg_win_loss(changes: Sequence[float]) -> tuple[float, float]:
    """Mean of the strictly positive and strictly negative changes (0 for an empty side)."""

    arr = np.asarray(changes, dtype=float)
    wins = arr[arr > 0]
    losses = arr[arr < 0]
    avg_win = float(np.mean(wins)) if wins.size else 0.0
    avg_loss = float(np.mean(losses)) if losses.size else 0.0
    return avg_win, avg_loss


def compute_profit_factor(changes: Sequence[float]) -> Optional[float]:
    """Gross gains over gross losses; ``None`` when nothing was lost."""

    arr = np.asarray(changes, dtype=float)
    gross_win = float(np.sum(arr[arr > 0]))
    gross_loss = abs(float(np.sum(arr[arr < 0])))
    if gross_loss == 0:
        return None
    return gross_win / gross_loss


def compute_max_drawdown(values: Sequence[float]) -> float:
    """Largest percentage fall from a running peak, returned as a non-positive number.

    Points where the running peak is not positive contribute no drawdown.
    ``[100, 120, 90, 150]`` gives ``-25.0``.
    """

    if len(values) == 0:
        return 0.0
    peak = float(values[0])
    max_dd = 0.0
    for value in values:
        value = float(value)
        if value > peak:
            peak = value
        drawdown = (peak - value) / peak * 100.0 if peak > 0 else 0.0
        if drawdown > max_dd:
            max_dd = drawdown
    return -max_dd


def compute_sharpe_ratio(changes: Sequence[float], periods_per_year: float = TRADING_PERIODS_PER_YEAR) -> Optional[float]:
    """Annualised mean over population standard deviation; ``None`` for zero variance."""

    arr = np.asarray(changes, dtype=float)
    if arr.size == 0:
        return None
    std = float(np.std(arr))
    if math.isclose(std, 0.0, abs_tol=_ZERO_STD_TOL):
        return None
    return float(np.mean(arr)) / std * math.sqrt(periods_per_year)


def compute_sortino_ratio(changes: Sequence[float], periods_per_year: float = TRADING_PERIODS_PER_YEAR) -> Optional[float]:
    """Annualised mean over downside deviation (RMS of the negative changes).

    ``None`` when there are no negative changes.
    """

    arr = np.asarray(changes, dtype=float)
    negative = arr[arr < 0]
    if negative.size == 0:
        return None
    downside = math.sqrt(float(np.mean(negative**2)))
    if math.isclose(downside, 0.0, abs_tol=_ZERO_STD_TOL):
        return None
    return float(np.mean(arr)) / downside * math.sqrt(periods_per_year)


def compute_cagr(start_value: float, end_value: float, years: float) -> Optional[float]:
    """Compound annual growth in percent, or ``None`` when it is undefined.

    Undefined covers a non-positive duration, start or end value. A result
    that overflows float range comes back as ``inf``.
    """

    if years <= 0 or start_value <= 0 or end_value <= 0:
        return None
    with np.errstate(over="ignore"):
        growth = float(np.power(end_value / start_value, 1.0 / years))
    return (growth - 1.0) * 100.0


class MetricsCalculator:
    """Compute the metrics set for one window from a portfolio series."""

    def __init__(
        self,
        periods_per_year: float = TRADING_PERIODS_PER_YEAR,
        days_per_year: float = DAYS_PER_YEAR,
        cagr_cap: float = CAGR_CAP,
    ) -> None:
        self.periods_per_year = periods_per_year
        self.days_per_year = days_per_year
        self.cagr_cap = cagr_cap

    @staticmethod
    def empty_result(window: str) -> MetricsResult:
        """Zeroed metrics for a window with no data: numeric fields 0, ratios ``None``."""

        return MetricsResult(window=window)

    def compute(
        self,
        window: str,
        series: PortfolioSeries,
        initial_capital: float,
        rolling_years: Optional[float] = None,
    ) -> MetricsResult:
        """Compute metrics for ``series`` according to its aggregation strategy.

        Args:
            window: Label copied into the result.
            series: Output of :class:`PortfolioAggregator`.
            initial_capital: Starting capital for CAGR and dollar conversions.
            rolling_years: Window length in years when called from the rolling
                analyzer; switches CAGR to the rolling conventions.

        Returns:
            MetricsResult; zeroed when the change series is empty.
        """

        if series.is_empty:
            return self.empty_result(window)
        if series.strategy is AggregationStrategy.DELTA_WEIGHTED:
            result = self._delta_metrics(window, series, initial_capital)
        else:
            result = self._equity_metrics(window, series, initial_capital, rolling_years)
        logger.debug(
            "Window metrics computed | window=%s strategy=%s periods=%d",
            window,
            series.strategy.value,
            len(series.changes),
        )
        return result

    def _delta_metrics(self, window: str, series: PortfolioSeries, initial_capital: float) -> MetricsResult:
        changes = np.asarray(series.changes, dtype=float)
        cumulative = np.cumsum(changes)
        total_pnl = float(cumulative[-1])
        avg_win, avg_loss = compute_avg_win_loss(changes)

        years = changes.size / self.days_per_year
        cagr = compute_cagr(initial_capital, initial_capital + total_pnl, years)

        return MetricsResult(
            window=window,
            max_drawdown=compute_max_drawdown(cumulative.tolist()),
            cagr=cagr if cagr is not None and math.isfinite(cagr) else 0.0,
            total_pnl=total_pnl,
            sharpe_ratio=compute_sharpe_ratio(changes, self.periods_per_year),
            sortino_ratio=compute_sortino_ratio(changes, self.periods_per_year),
            win_rate=compute_win_rate(changes),
            avg_win=avg_win,
            avg_loss=avg_loss,
            profit_factor=compute_profit_factor(changes),
        )

    def _equity_metrics(
        self,
        window: str,
        series: PortfolioSeries,
        initial_capital: float,
        rolling_years: Optional[float],
    ) -> MetricsResult:
        changes = np.asarray(series.changes, dtype=float)
        equity_curve = series.equity_curve or [initial_capital]
        final_equity = float(equity_curve[-1])
        total_pnl = final_equity - initial_capital

        # Percentage changes are reported back in dollars of initial capital.
        avg_win_pct, avg_loss_pct = compute_avg_win_loss(changes)

        return MetricsResult(
            window=window,
            max_drawdown=compute_max_drawdown(equity_curve),
            cagr=self._equity_cagr(initial_capital, final_equity, changes.size, rolling_years),
            total_pnl=total_pnl,
            sharpe_ratio=compute_sharpe_ratio(changes, self.periods_per_year),
            sortino_ratio=compute_sortino_ratio(changes, self.periods_per_year),
            win_rate=compute_win_rate(changes),
            avg_win=avg_win_pct * initial_capital / 100.0,
            avg_loss=avg_loss_pct * initial_capital / 100.0,
            profit_factor=compute_profit_factor(changes),
        )

    def _equity_cagr(
        self,
        initial_capital: float,
        final_equity: float,
        periods: int,
        rolling_years: Optional[float],
    ) -> float:
        if rolling_years is not None:
            cagr = compute_cagr(initial_capital, final_equity, rolling_years)
            return 0.0 if cagr is None else cagr

        cagr = compute_cagr(initial_capital, final_equity, periods / self.days_per_year)
        if cagr is None:
            cagr = (final_equity / initial_capital - 1.0) * 100.0 if initial_capital > 0 else 0.0
        return min(cagr, self.cagr_cap)


__all__ = [
    "TRADING_PERIODS_PER_YEAR",
    "DAYS_PER_YEAR",
    "CAGR_CAP",
    "compute_win_rate",
    "compute_avg_win_loss",
    "compute_profit_factor",
    "compute_max_drawdown",
    "compute_sharpe_ratio",
    "compute_sortino_ratio",
    "compute_cagr",
    "MetricsCalculator",
]
