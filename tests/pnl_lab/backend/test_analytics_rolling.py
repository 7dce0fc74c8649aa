import pandas as pd
import pytest

from pnl_lab.backend.core.analytics.aligner import parse_rolling_window
from pnl_lab.backend.core.analytics.models import RollingSample
from pnl_lab.backend.core.analytics.rolling import RollingWindowAnalyzer, summarize_metric_distribution
from pnl_lab.backend.core.errors import InsufficientDataError
from pnl_lab.backend.core.observations import Observation


def _daily(values: list[float]) -> pd.Series:
    index = pd.date_range("2024-01-01", periods=len(values), freq="D", tz="UTC")
    return pd.Series(values, index=index)


def _sample(sharpe, start: str) -> RollingSample:
    return RollingSample(start_date=start, end_date=start, sharpe=sharpe)


def test_sample_count_and_dates() -> None:
    analyzer = RollingWindowAnalyzer()

    samples = analyzer.analyze(_daily([1_000.0] * 10), parse_rolling_window("5d"), 1_000_000)

    assert len(samples) == 6
    assert samples[0].start_date == "2024-01-01"
    assert samples[0].end_date == "2024-01-05"
    assert samples[-1].end_date == "2024-01-10"
    assert samples[0].return_pct == pytest.approx(0.5)
    assert samples[0].drawdown == 0.0
    assert samples[0].cagr_max_dd_ratio is None
    assert samples[0].sortino is None


def test_step_skips_window_positions() -> None:
    samples = RollingWindowAnalyzer().analyze(_daily([1_000.0] * 10), parse_rolling_window("5d"), 1_000_000, step=2)

    assert [s.end_date for s in samples] == ["2024-01-05", "2024-01-07", "2024-01-09"]


def test_insufficient_history() -> None:
    with pytest.raises(InsufficientDataError) as excinfo:
        RollingWindowAnalyzer().analyze(_daily([1.0, 2.0, 3.0]), parse_rolling_window("5d"), 100_000)

    assert str(excinfo.value) == "Not enough data. Need at least 5 day periods, have 3"


def test_iter_samples_is_lazy_and_restartable() -> None:
    analyzer = RollingWindowAnalyzer()
    pnl = _daily([500.0, -200.0, 300.0, 100.0])
    config = parse_rolling_window("2d")

    first_pass = analyzer.iter_samples(pnl, config, 1_000_000)
    first = next(first_pass)

    again = list(analyzer.iter_samples(pnl, config, 1_000_000))
    assert len(again) == 3
    assert again[0] == first


def test_windows_start_from_initial_capital_independently() -> None:
    samples = RollingWindowAnalyzer().analyze(
        _daily([50_000.0, -100_000.0, 80_000.0, 0.0]), parse_rolling_window("3d"), 1_000_000
    )

    first = samples[0]
    assert first.drawdown == pytest.approx(-(1.05 - 0.95) / 1.05 * 100)
    assert first.return_pct == pytest.approx(3.0)
    assert first.total_pnl == pytest.approx(30_000.0)
    assert first.cagr_max_dd_ratio == pytest.approx(first.cagr / abs(first.drawdown))

    second = samples[1]
    assert second.return_pct == pytest.approx(-2.0)


def test_overflowing_cagr_is_reported_as_missing() -> None:
    index = pd.date_range("2024-01-01", periods=2, freq="h", tz="UTC")
    pnl = pd.Series([1_000_000.0, 1_000_000.0], index=index)

    samples = RollingWindowAnalyzer().analyze(pnl, parse_rolling_window("1h"), 1_000_000)

    assert len(samples) == 2
    assert samples[0].cagr is None
    assert samples[0].cagr_max_dd_ratio is None
    assert samples[0].start_date == "2024-01-01 00:00"


def _hourly_observations(hours: int) -> list[Observation]:
    start = pd.Timestamp("2024-01-01 00:00", tz="UTC")
    return [
        Observation(trader_id="0xaaa", timestamp=start + pd.Timedelta(hours=i), total_pnl=100.0 * i)
        for i in range(hours + 1)
    ]


def test_analyze_many_buckets_each_window_at_its_own_resolution() -> None:
    configs = [parse_rolling_window("6h"), parse_rolling_window("2d"), parse_rolling_window("6h")]

    runs = RollingWindowAnalyzer().analyze_many(_hourly_observations(72), {"0xaaa": 100.0}, configs, 1_000_000)

    assert [config.token for config, _ in runs] == ["6h", "2d", "6h"]

    hourly_config, hourly = runs[0]
    assert hourly_config.periods_per_year == 8760
    assert len(hourly) == 72 - 6 + 1
    assert hourly[0].start_date == "2024-01-01 01:00"
    assert hourly[0].end_date == "2024-01-01 06:00"

    daily_config, daily = runs[1]
    assert daily_config.periods_per_year == 252
    assert len(daily) == 2
    assert daily[0].start_date == "2024-01-02"
    assert daily[0].end_date == "2024-01-03"
    assert daily[0].total_pnl == pytest.approx(4_800.0)

    assert runs[2][1] == hourly


def test_analyze_many_reports_short_history() -> None:
    with pytest.raises(InsufficientDataError):
        RollingWindowAnalyzer().analyze_many(
            _hourly_observations(72), {"0xaaa": 100.0}, [parse_rolling_window("6h"), parse_rolling_window("1m")], 100_000
        )


def test_invalid_step() -> None:
    with pytest.raises(ValueError):
        list(RollingWindowAnalyzer().iter_samples(_daily([1.0, 2.0]), parse_rolling_window("1d"), 100_000, step=0))


def test_metric_distribution_table() -> None:
    samples = [
        _sample(1.0, "2024-01-01"),
        _sample(3.0, "2024-01-02"),
        _sample(None, "2024-01-03"),
        _sample(2.0, "2024-01-04"),
        _sample(4.0, "2024-01-05"),
    ]

    table = summarize_metric_distribution(samples, "sharpe")

    assert table.best == 4.0
    assert table.worst == 1.0
    assert table.average == pytest.approx(2.5)
    assert table.median == pytest.approx(2.5)
    assert table.std_dev == pytest.approx(1.25**0.5)
    assert table.percentile10 == 1.0
    assert table.percentile25 == 1.0
    assert table.percentile75 == 3.0
    assert table.percentile90 == 3.0
    assert table.best_period_start == "2024-01-05"
    assert table.worst_period_start == "2024-01-01"


def test_metric_distribution_of_nothing() -> None:
    table = summarize_metric_distribution([_sample(None, "2024-01-01")], "sharpe")

    assert table.best == 0.0
    assert table.best_period_start == ""


def test_unknown_metric() -> None:
    with pytest.raises(ValueError):
        summarize_metric_distribution([_sample(1.0, "2024-01-01")], "alpha")


def test_unknown_metric_without_samples() -> None:
    with pytest.raises(ValueError):
        summarize_metric_distribution([], "alpha")
