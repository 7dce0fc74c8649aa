"""Window parsing and per-trader time-series alignment."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, Optional

import pandas as pd

from pnl_lab.backend.core.analytics.models import IntervalType, RollingWindowConfig, WindowSpec
from pnl_lab.backend.core.errors import InvalidWindowError
from pnl_lab.backend.core.observations.models import Observation

logger = logging.getLogger(__name__)

WINDOW_PATTERN = re.compile(r"(\d+)([hdmy])")
DEFAULT_WINDOW = WindowSpec(count=30, unit="d")
TRADING_PERIODS_PER_YEAR = 252
HOURLY_PERIODS_PER_YEAR = 24 * 365

_BUCKET_FREQ = {"day": "D", "hour": "h"}


def parse_window(token: str) -> WindowSpec:
    """Parse a lookback token such as ``7d`` or ``3m``; anything else means 30 days."""

    match = WINDOW_PATTERN.fullmatch(token or "")
    if match is None:
        return DEFAULT_WINDOW
    count, unit = match.groups()
    return WindowSpec(count=int(count), unit=unit)


def window_to_interval(token: str) -> str:
    """Translate a window token into an interval string (``"7d"`` -> ``"7 days"``)."""

    return parse_window(token).interval


def parse_rolling_window(
    token: str,
    trading_periods_per_year: int = TRADING_PERIODS_PER_YEAR,
    hourly_periods_per_year: int = HOURLY_PERIODS_PER_YEAR,
) -> RollingWindowConfig:
    """Translate a rolling window token into a period count and annualisation.

    Hour windows run over hourly buckets; day, month (30 days) and year
    (365 days) windows run over daily buckets. Unlike :func:`parse_window`
    there is no fallback: malformed tokens raise :class:`InvalidWindowError`.
    """

    match = WINDOW_PATTERN.fullmatch(token or "")
    if match is None:
        raise InvalidWindowError(token)
    value = int(match.group(1))
    unit = match.group(2)
    if value <= 0:
        raise InvalidWindowError(token)

    if unit == "h":
        return RollingWindowConfig(
            token=token, periods=value, interval_type="hour", periods_per_year=hourly_periods_per_year
        )
    periods = {"d": value, "m": value * 30, "y": value * 365}[unit]
    return RollingWindowConfig(
        token=token, periods=periods, interval_type="day", periods_per_year=trading_periods_per_year
    )


class TimeSeriesAligner:
    """Bucket raw cumulative P&L observations into one value per period per trader.

    The last observation by wall-clock time wins inside a bucket. Buckets
    without observations are left out rather than interpolated, so traders
    may end up with different bucket sets.
    """

    def __init__(self, resolution: IntervalType = "day") -> None:
        if resolution not in _BUCKET_FREQ:
            raise ValueError(f"Unsupported resolution: {resolution}")
        self.resolution = resolution

    @staticmethod
    def to_frame(observations: Iterable[Observation]) -> pd.DataFrame:
        """Materialise observations as a ``trader_id/timestamp/total_pnl`` frame."""

        rows = [(obs.trader_id, obs.timestamp, obs.total_pnl) for obs in observations]
        frame = pd.DataFrame(rows, columns=["trader_id", "timestamp", "total_pnl"])
        frame["timestamp"] = pd.to_datetime(frame["timestamp"], utc=True)
        frame["total_pnl"] = frame["total_pnl"].astype(float)
        return frame

    def align(
        self,
        observations: Iterable[Observation],
        window: Optional[WindowSpec] = None,
        now: Optional[pd.Timestamp] = None,
    ) -> Dict[str, pd.Series]:
        """Return the cumulative P&L per bucket for each trader.

        Args:
            observations: Raw readings, in any order.
            window: Optional lookback; readings before ``now - window`` or after ``now`` are dropped.
            now: Reference time for the window, required when ``window`` is given.

        Returns:
            Mapping of trader id to a Series indexed by bucket start (UTC), ascending.
        """

        frame = self.to_frame(observations)
        if window is not None:
            if now is None:
                raise ValueError("now is required when a window is given")
            now = pd.Timestamp(now)
            if now.tzinfo is None:
                now = now.tz_localize("UTC")
            start = window.window_start(now)
            frame = frame[(frame["timestamp"] >= start) & (frame["timestamp"] <= now)]
        if frame.empty:
            return {}

        frame = frame.sort_values("timestamp", kind="mergesort")
        frame = frame.assign(bucket=frame["timestamp"].dt.floor(_BUCKET_FREQ[self.resolution]))
        frame = frame.drop_duplicates(subset=["trader_id", "bucket"], keep="last")

        aligned: Dict[str, pd.Series] = {}
        for trader_id, group in frame.groupby("trader_id", sort=True):
            series = group.set_index("bucket")["total_pnl"].sort_index()
            series.index.name = self.resolution
            aligned[str(trader_id)] = series
        logger.debug("Aligned observations | resolution=%s traders=%d", self.resolution, len(aligned))
        return aligned

    @staticmethod
    def deltas(aligned: Dict[str, pd.Series]) -> Dict[str, pd.Series]:
        """Per-bucket change against the previous present bucket; the first bucket is dropped."""

        out: Dict[str, pd.Series] = {}
        for trader_id, series in aligned.items():
            delta = series.diff().iloc[1:]
            if not delta.empty:
                out[trader_id] = delta
        return out

    def align_deltas(
        self,
        observations: Iterable[Observation],
        window: Optional[WindowSpec] = None,
        now: Optional[pd.Timestamp] = None,
    ) -> Dict[str, pd.Series]:
        """Shortcut for :meth:`align` followed by :meth:`deltas`."""

        return self.deltas(self.align(observations, window=window, now=now))


__all__ = [
    "WINDOW_PATTERN",
    "DEFAULT_WINDOW",
    "TRADING_PERIODS_PER_YEAR",
    "HOURLY_PERIODS_PER_YEAR",
    "parse_window",
    "window_to_interval",
    "parse_rolling_window",
    "TimeSeriesAligner",
]
