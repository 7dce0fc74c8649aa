"""Analytics core modules for the P&L Lab backend."""

from pnl_lab.backend.core.analytics.aligner import (
    TimeSeriesAligner,
    parse_rolling_window,
    parse_window,
    window_to_interval,
)
from pnl_lab.backend.core.analytics.aggregator import PortfolioAggregator, percent_changes, weight_map
from pnl_lab.backend.core.analytics.metrics import MetricsCalculator
from pnl_lab.backend.core.analytics.rolling import RollingWindowAnalyzer, summarize_metric_distribution
from pnl_lab.backend.core.analytics.distribution import DistributionSummarizer
from pnl_lab.backend.core.analytics.models import (
    AggregationStrategy,
    DistributionStats,
    DistributionSummary,
    HistogramBin,
    MetricDistribution,
    MetricsResult,
    PortfolioSeries,
    RollingAnalysisResult,
    RollingSample,
    RollingWindowConfig,
    TraderRollingSeries,
    TraderTimeline,
    WindowSpec,
)

__all__ = [
    "TimeSeriesAligner",
    "parse_window",
    "parse_rolling_window",
    "window_to_interval",
    "PortfolioAggregator",
    "percent_changes",
    "weight_map",
    "MetricsCalculator",
    "RollingWindowAnalyzer",
    "summarize_metric_distribution",
    "DistributionSummarizer",
    "AggregationStrategy",
    "DistributionStats",
    "DistributionSummary",
    "HistogramBin",
    "MetricDistribution",
    "MetricsResult",
    "PortfolioSeries",
    "RollingAnalysisResult",
    "RollingSample",
    "RollingWindowConfig",
    "TraderRollingSeries",
    "TraderTimeline",
    "WindowSpec",
]
