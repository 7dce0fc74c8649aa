import pandas as pd
import pytest

from pnl_lab.backend.core.analytics.aligner import (
    TimeSeriesAligner,
    parse_rolling_window,
    parse_window,
    window_to_interval,
)
from pnl_lab.backend.core.errors import InvalidWindowError
from pnl_lab.backend.core.observations import Observation


def _obs(trader: str, ts: str, pnl: float) -> Observation:
    return Observation(trader_id=trader, timestamp=ts, total_pnl=pnl)


@pytest.mark.parametrize(
    "token, expected",
    [("7d", "7 days"), ("3m", "3 months"), ("2y", "2 years"), ("6h", "6 hours"), ("abc", "30 days"), ("", "30 days")],
)
def test_window_to_interval(token: str, expected: str) -> None:
    assert window_to_interval(token) == expected


def test_parse_window_offsets() -> None:
    now = pd.Timestamp("2024-03-31 00:00", tz="UTC")
    assert parse_window("1m").window_start(now) == pd.Timestamp("2024-02-29 00:00", tz="UTC")
    assert parse_window("12h").window_start(now) == pd.Timestamp("2024-03-30 12:00", tz="UTC")


def test_parse_rolling_window_units() -> None:
    day = parse_rolling_window("30d")
    assert (day.periods, day.interval_type, day.periods_per_year) == (30, "day", 252)

    assert parse_rolling_window("2m").periods == 60
    assert parse_rolling_window("1y").periods == 365

    hour = parse_rolling_window("24h")
    assert (hour.periods, hour.interval_type, hour.periods_per_year) == (24, "hour", 8760)
    assert hour.years == pytest.approx(24 / 8760)


@pytest.mark.parametrize("token", ["abc", "0d", "7w", "d7", ""])
def test_parse_rolling_window_rejects_malformed_tokens(token: str) -> None:
    with pytest.raises(InvalidWindowError) as excinfo:
        parse_rolling_window(token)
    assert str(excinfo.value) == "Invalid window size"


def test_align_keeps_last_reading_per_day_and_leaves_gaps() -> None:
    observations = [
        _obs("0xA", "2024-01-04T09:00:00Z", 200),
        _obs("0xA", "2024-01-01T18:00:00Z", 150),
        _obs("0xA", "2024-01-02T12:00:00Z", 170),
        _obs("0xA", "2024-01-01T10:00:00Z", 100),
    ]

    aligned = TimeSeriesAligner("day").align(observations)

    series = aligned["0xa"]
    assert list(series.index) == [
        pd.Timestamp("2024-01-01", tz="UTC"),
        pd.Timestamp("2024-01-02", tz="UTC"),
        pd.Timestamp("2024-01-04", tz="UTC"),
    ]
    assert list(series) == [150, 170, 200]


def test_deltas_drop_first_bucket_and_single_bucket_traders() -> None:
    observations = [
        _obs("a", "2024-01-01T00:00:00Z", 100),
        _obs("a", "2024-01-02T00:00:00Z", 120),
        _obs("a", "2024-01-04T00:00:00Z", 90),
        _obs("b", "2024-01-03T00:00:00Z", 50),
    ]

    deltas = TimeSeriesAligner("day").align_deltas(observations)

    assert set(deltas) == {"a"}
    assert list(deltas["a"]) == [20, -30]
    assert deltas["a"].index[0] == pd.Timestamp("2024-01-02", tz="UTC")


def test_align_applies_lookback_window() -> None:
    observations = [_obs("a", f"2024-01-0{day}T00:00:00Z", day * 10) for day in range(1, 6)]
    now = pd.Timestamp("2024-01-05 12:00")

    aligned = TimeSeriesAligner("day").align(observations, window=parse_window("2d"), now=now)

    assert list(aligned["a"]) == [40, 50]


def test_align_requires_now_with_window() -> None:
    with pytest.raises(ValueError):
        TimeSeriesAligner("day").align([], window=parse_window("7d"))


def test_hourly_alignment() -> None:
    observations = [
        _obs("a", "2024-01-01T10:05:00Z", 1),
        _obs("a", "2024-01-01T10:55:00Z", 2),
        _obs("a", "2024-01-01T11:10:00Z", 5),
    ]

    deltas = TimeSeriesAligner("hour").align_deltas(observations)

    assert list(deltas["a"]) == [3]
    assert deltas["a"].index[0] == pd.Timestamp("2024-01-01 11:00", tz="UTC")


def test_unsupported_resolution() -> None:
    with pytest.raises(ValueError):
        TimeSeriesAligner("week")
