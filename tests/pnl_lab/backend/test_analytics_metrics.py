import math

import pandas as pd
import pytest

from pnl_lab.backend.core.analytics.aggregator import PortfolioAggregator
from pnl_lab.backend.core.analytics.metrics import (
    MetricsCalculator,
    compute_cagr,
    compute_max_drawdown,
    compute_profit_factor,
    compute_sharpe_ratio,
    compute_sortino_ratio,
    compute_win_rate,
)
from pnl_lab.backend.core.analytics.models import AggregationStrategy, PortfolioSeries


def _delta_series(changes: list[float]) -> PortfolioSeries:
    return PortfolioSeries(strategy=AggregationStrategy.DELTA_WEIGHTED, weighted_pnl=changes, changes=changes)


def _equity_series(weighted: list[float], initial_capital: float) -> PortfolioSeries:
    index = pd.date_range("2024-01-01", periods=len(weighted), freq="D", tz="UTC")
    return PortfolioAggregator().equity_series(pd.Series(weighted, index=index), initial_capital)


def test_empty_series_gives_zeroed_result() -> None:
    result = MetricsCalculator().compute("7d", PortfolioSeries(strategy=AggregationStrategy.DELTA_WEIGHTED), 100_000)

    assert result.window == "7d"
    assert result.max_drawdown == 0.0
    assert result.cagr == 0.0
    assert result.total_pnl == 0.0
    assert result.win_rate == 0.0
    assert result.sharpe_ratio is None
    assert result.sortino_ratio is None
    assert result.profit_factor is None


def test_all_positive_changes() -> None:
    result = MetricsCalculator().compute("7d", _delta_series([10.0, 20.0, 30.0]), 100_000)

    assert result.win_rate == 100.0
    assert result.profit_factor is None
    assert result.avg_loss == 0.0
    assert result.avg_win == pytest.approx(20.0)
    assert result.total_pnl == pytest.approx(60.0)
    assert result.sortino_ratio is None


def test_constant_series_has_no_ratios() -> None:
    result = MetricsCalculator().compute("7d", _delta_series([5.0, 5.0, 5.0]), 100_000)

    assert result.sharpe_ratio is None
    assert result.sortino_ratio is None


def test_alternating_series_has_zero_sharpe() -> None:
    changes = [1.0, -1.0, 1.0, -1.0]

    assert compute_sharpe_ratio(changes) == 0.0
    assert compute_sortino_ratio(changes) == 0.0
    assert compute_win_rate(changes) == 50.0


def test_sharpe_and_sortino_values() -> None:
    changes = [2.0, -1.0]

    assert compute_sharpe_ratio(changes) == pytest.approx(0.5 / 1.5 * math.sqrt(252))
    assert compute_sortino_ratio(changes) == pytest.approx(0.5 * math.sqrt(252))
    assert compute_sharpe_ratio(changes, periods_per_year=8760) == pytest.approx(0.5 / 1.5 * math.sqrt(8760))


def test_max_drawdown() -> None:
    assert compute_max_drawdown([100, 120, 90, 150]) == pytest.approx(-25.0)
    assert compute_max_drawdown([100, 110, 120]) == 0.0
    assert compute_max_drawdown([]) == 0.0
    assert compute_max_drawdown([0, -10, -5]) == 0.0


def test_profit_factor() -> None:
    assert compute_profit_factor([3.0, -1.0]) == pytest.approx(3.0)
    assert compute_profit_factor([1.0, 2.0]) is None


def test_cagr_over_one_year() -> None:
    assert compute_cagr(100_000, 110_000, 1.0) == pytest.approx(10.0)
    assert compute_cagr(100_000, 110_000, 0) is None
    assert compute_cagr(100_000, -5.0, 1.0) is None


def test_delta_weighted_cagr_uses_calendar_days() -> None:
    changes = [10_000 / 365] * 365

    result = MetricsCalculator().compute("1y", _delta_series(changes), 100_000)

    assert result.total_pnl == pytest.approx(10_000)
    assert result.cagr == pytest.approx(10.0)


def test_delta_weighted_drawdown_uses_cumulative_pnl() -> None:
    result = MetricsCalculator().compute("7d", _delta_series([100.0, 20.0, -30.0, 60.0]), 100_000)

    assert result.max_drawdown == pytest.approx(-25.0)


def test_capital_scaled_metrics() -> None:
    series = _equity_series([10_000.0, -5_000.0], 1_000_000)

    result = MetricsCalculator().compute("7d", series, 1_000_000)

    assert result.total_pnl == pytest.approx(5_000.0)
    assert result.avg_win == pytest.approx(10_000.0)
    assert result.avg_loss == pytest.approx((1.005 / 1.01 - 1.0) * 1_000_000)
    assert result.max_drawdown == pytest.approx((1.005 / 1.01 - 1.0) * 100)
    assert result.win_rate == 50.0
    assert result.profit_factor is not None


def test_equity_cagr_is_capped_but_delta_cagr_is_not() -> None:
    equity = MetricsCalculator().compute("1d", _equity_series([1_000_000.0], 1_000_000), 1_000_000)
    assert equity.cagr == 99999.0

    delta = MetricsCalculator().compute("1d", _delta_series([1_000_000.0]), 1_000_000)
    assert delta.cagr > 99999.0


def test_rolling_cagr_uses_window_years() -> None:
    series = _equity_series([100_000.0], 1_000_000)

    result = MetricsCalculator().compute("1y", series, 1_000_000, rolling_years=1.0)

    assert result.cagr == pytest.approx(10.0)
