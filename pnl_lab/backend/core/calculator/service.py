"""Calculator service: observation retrieval plus the analytics pipeline."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd

from pnl_lab.backend.core.analytics.aggregator import PortfolioAggregator, weight_map
from pnl_lab.backend.core.analytics.aligner import TimeSeriesAligner, parse_rolling_window, parse_window
from pnl_lab.backend.core.analytics.distribution import DistributionSummarizer
from pnl_lab.backend.core.analytics.metrics import MetricsCalculator
from pnl_lab.backend.core.analytics.models import (
    DistributionSummary,
    MetricsResult,
    RollingAnalysisResult,
    RollingWindowConfig,
    TraderRollingSeries,
    TraderTimeline,
)
from pnl_lab.backend.core.analytics.rolling import RollingWindowAnalyzer, summarize_metric_distribution
from pnl_lab.backend.core.calculator.models import (
    AllocationInput,
    CalculatorRequest,
    CalculatorResponse,
    DistributionRequest,
    RollingRequest,
)
from pnl_lab.backend.core.errors import CalculatorValidationError
from pnl_lab.backend.core.observations import Observation, ObservationSource
from pnl_lab.backend.core.utils.datetime import format_period, utc_now
from pnl_lab.backend.settings import CalculatorSettings, get_settings

logger = logging.getLogger(__name__)

# Rolling result field -> RollingSample metric key.
_DISTRIBUTION_FIELDS = {
    "sharpe_ratio": "sharpe",
    "sortino_ratio": "sortino",
    "max_drawdown": "drawdown",
    "total_return": "return_pct",
    "win_rate": "win_rate",
    "cagr": "cagr",
    "cagr_max_dd_ratio": "cagr_max_dd_ratio",
}


class CalculatorService:
    """Validate calculator requests, fetch observations and run the analytics engine.

    Holds no per-request state: every call refetches and recomputes.
    """

    def __init__(
        self,
        source: ObservationSource,
        settings: Optional[CalculatorSettings] = None,
        clock: Callable[[], pd.Timestamp] = utc_now,
    ) -> None:
        self.source = source
        self.settings = settings or get_settings()
        self.clock = clock
        self.aggregator = PortfolioAggregator(reference_capital=self.settings.reference_capital)
        self.calculator = MetricsCalculator(
            periods_per_year=self.settings.trading_periods_per_year,
            cagr_cap=self.settings.cagr_cap,
        )
        self.analyzer = RollingWindowAnalyzer(reference_capital=self.settings.reference_capital)
        self.summarizer = DistributionSummarizer(bin_count=self.settings.default_bin_count)

    def calculate(self, request: CalculatorRequest) -> CalculatorResponse:
        """Metrics per requested window, in request order.

        Raises:
            CalculatorValidationError: when allocations or windows are empty.
        """

        if not request.allocations:
            raise CalculatorValidationError("At least one allocation is required")
        if not request.windows:
            raise CalculatorValidationError("At least one window is required")

        initial_capital = self._initial_capital(request.initial_capital)
        trader_ids = self._trader_ids(request.allocations)
        aligner = TimeSeriesAligner(resolution="day")
        now = self.clock()

        results: List[MetricsResult] = []
        for token in request.windows:
            spec = parse_window(token)
            since = spec.window_start(now)
            observations = self.source.fetch(trader_ids, since=since, until=now)
            deltas = aligner.align_deltas(observations, window=spec, now=now)
            series = self.aggregator.aggregate(deltas, request.allocations, request.strategy, initial_capital)
            result = self.calculator.compute(token, series, initial_capital)
            logger.debug(
                "Calculator window done | window=%s interval=%s observations=%d days=%d",
                token,
                spec.interval,
                len(observations),
                len(series.changes),
            )
            results.append(result)
        return CalculatorResponse(metrics=results)

    def calculate_rolling(self, request: RollingRequest) -> RollingAnalysisResult:
        """Rolling analysis and per-metric distributions for one window token.

        Raises:
            CalculatorValidationError: missing allocations or window.
            InvalidWindowError: malformed window token.
            InsufficientDataError: fewer periods of history than the window needs.
        """

        if not request.allocations:
            raise CalculatorValidationError("At least one allocation is required")
        if not request.window:
            raise CalculatorValidationError("Window size is required")

        config = parse_rolling_window(
            request.window,
            trading_periods_per_year=self.settings.trading_periods_per_year,
            hourly_periods_per_year=self.settings.hourly_periods_per_year,
        )
        initial_capital = self._initial_capital(request.initial_capital)
        trader_ids = self._trader_ids(request.allocations)

        observations = self.source.fetch(trader_ids)
        [(_, samples)] = self.analyzer.analyze_many(
            observations, weight_map(request.allocations), [config], initial_capital, step=request.step
        )
        deltas = TimeSeriesAligner(resolution=config.interval_type).align_deltas(observations)
        distributions = {
            field: summarize_metric_distribution(samples, key) for field, key in _DISTRIBUTION_FIELDS.items()
        }
        return RollingAnalysisResult(
            window=request.window,
            sample_count=len(samples),
            time_series=samples,
            trader_timelines=self._trader_timelines(observations, request.allocations, config),
            individual_trader_series=self._individual_series(deltas, config, initial_capital, request.step),
            **distributions,
        )

    def summarize_distribution(self, request: DistributionRequest) -> DistributionSummary:
        """Histogram and statistics for one metric of already computed rolling samples."""

        return self.summarizer.summarize_samples(request.samples, request.metric, bin_count=request.bin_count)

    def _initial_capital(self, value: Optional[float]) -> float:
        return float(value) if value is not None else self.settings.default_initial_capital

    @staticmethod
    def _trader_ids(allocations: Sequence[AllocationInput]) -> List[str]:
        return list(dict.fromkeys(a.trader_address.strip().lower() for a in allocations))

    def _individual_series(
        self,
        deltas: Dict[str, pd.Series],
        config: RollingWindowConfig,
        initial_capital: float,
        step: int,
    ) -> List[TraderRollingSeries]:
        out: List[TraderRollingSeries] = []
        for trader_id in sorted(deltas):
            trader_pnl = deltas[trader_id]
            if len(trader_pnl) < config.periods:
                continue
            samples = list(self.analyzer.iter_samples(trader_pnl, config, initial_capital, step=step))
            if samples:
                out.append(TraderRollingSeries(trader_id=trader_id, data=samples))
        return out

    @staticmethod
    def _trader_timelines(
        observations: Sequence[Observation],
        allocations: Sequence[AllocationInput],
        config: RollingWindowConfig,
    ) -> List[TraderTimeline]:
        weights = weight_map(allocations)
        bounds: Dict[str, List[pd.Timestamp]] = {}
        for obs in observations:
            ts = pd.Timestamp(obs.timestamp)
            first_last = bounds.setdefault(obs.trader_id, [ts, ts])
            first_last[0] = min(first_last[0], ts)
            first_last[1] = max(first_last[1], ts)

        ordered = sorted(bounds.items(), key=lambda item: item[1][0])
        return [
            TraderTimeline(
                trader_id=trader_id,
                first_data_date=format_period(first, config.interval_type),
                last_data_date=format_period(last, config.interval_type),
                percentage=weights.get(trader_id, 0.0),
            )
            for trader_id, (first, last) in ordered
        ]


__all__ = ["CalculatorService"]
