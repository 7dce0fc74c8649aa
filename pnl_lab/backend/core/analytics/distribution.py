"""Histogram, normal-curve overlay and summary statistics for metric samples."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy as np

from pnl_lab.backend.core.analytics.models import (
    DistributionStats,
    DistributionSummary,
    HistogramBin,
    RollingSample,
    resolve_metric,
)

DEFAULT_BIN_COUNT = 25


class DistributionSummarizer:
    """Turn a flat collection of metric values into display-ready distribution data."""

    def __init__(self, bin_count: int = DEFAULT_BIN_COUNT) -> None:
        if bin_count <= 0:
            raise ValueError("bin_count must be positive")
        self.bin_count = bin_count

    @staticmethod
    def histogram(values: Sequence[float], bin_count: int = DEFAULT_BIN_COUNT) -> List[HistogramBin]:
        """Split ``[min, max]`` into equal-width bins and count the values in each.

        Bins are half-open except the last, which also takes ``max``. When all
        values are equal a single bin of width 1 centred on the value is
        returned. ``frequency`` is each count divided by the tallest bin's count.
        """

        if bin_count <= 0:
            raise ValueError("bin_count must be positive")
        if len(values) == 0:
            return []

        arr = np.asarray(values, dtype=float)
        lo = float(np.min(arr))
        hi = float(np.max(arr))
        if hi == lo:
            return [HistogramBin(start=lo - 0.5, end=hi + 0.5, count=int(arr.size), frequency=1.0)]

        width = (hi - lo) / bin_count
        indices = np.minimum(np.floor((arr - lo) / width).astype(int), bin_count - 1)
        counts = np.bincount(indices, minlength=bin_count)
        tallest = int(counts.max())
        return [
            HistogramBin(
                start=lo + i * width,
                end=lo + (i + 1) * width,
                count=int(counts[i]),
                frequency=int(counts[i]) / tallest if tallest > 0 else 0.0,
            )
            for i in range(bin_count)
        ]

    @staticmethod
    def normal_curve(values: Sequence[float], bins: Sequence[HistogramBin]) -> List[float]:
        """Gaussian kernel at each bin midpoint, scaled so the peak is 1.

        All zeros when the values have no spread.
        """

        if len(values) == 0 or len(bins) == 0:
            return []
        arr = np.asarray(values, dtype=float)
        mean = float(np.mean(arr))
        std = float(np.std(arr))
        if std == 0:
            return [0.0 for _ in bins]

        points = []
        for b in bins:
            z = ((b.start + b.end) / 2.0 - mean) / std
            points.append(math.exp(-0.5 * z * z))
        peak = max(points)
        return [p / peak if peak > 0 else 0.0 for p in points]

    @staticmethod
    def summary_stats(values: Sequence[float]) -> Optional[DistributionStats]:
        """Mean, population std-dev, median, skewness, min and max.

        The median is the sorted element at index ``n // 2`` (the upper middle
        for even counts). Skewness is 0 when the values have no spread.
        """

        if len(values) == 0:
            return None
        arr = np.asarray(values, dtype=float)
        ordered = np.sort(arr)
        mean = float(np.mean(arr))
        std = float(np.std(arr))
        skewness = float(np.mean(((arr - mean) / std) ** 3)) if std > 0 else 0.0
        return DistributionStats(
            mean=mean,
            median=float(ordered[ordered.size // 2]),
            std_dev=std,
            skewness=skewness,
            min=float(ordered[0]),
            max=float(ordered[-1]),
        )

    def summarize(
        self,
        values: Sequence[float],
        bin_count: Optional[int] = None,
        metric: Optional[str] = None,
    ) -> DistributionSummary:
        """Histogram, normal curve and statistics for ``values`` in one payload."""

        bins = self.histogram(values, bin_count or self.bin_count)
        return DistributionSummary(
            metric=metric,
            sample_count=len(values),
            bins=bins,
            normal_curve=self.normal_curve(values, bins),
            stats=self.summary_stats(values),
        )

    def summarize_samples(
        self,
        samples: Sequence[RollingSample],
        metric: str,
        bin_count: Optional[int] = None,
    ) -> DistributionSummary:
        """Summarise one metric across rolling samples, skipping samples where it is ``None``.

        Raises ``ValueError`` for an unknown metric key, even when there are no samples.
        """

        resolve_metric(metric)
        values = [v for v in (sample.metric_value(metric) for sample in samples) if v is not None]
        return self.summarize(values, bin_count=bin_count, metric=metric)


__all__ = ["DEFAULT_BIN_COUNT", "DistributionSummarizer"]
