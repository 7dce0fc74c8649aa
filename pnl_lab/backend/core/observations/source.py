"""Observation sources: the read side of the P&L snapshot store."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence

import pandas as pd

from pnl_lab.backend.core.observations.models import Observation

logger = logging.getLogger(__name__)


class ObservationSource(ABC):
    """Interface for fetching cumulative P&L observations."""

    @abstractmethod
    def fetch(
        self,
        trader_ids: Sequence[str],
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> list[Observation]:
        """Return observations for the given traders within ``[since, until]``."""


def _in_range(obs: Observation, since: Optional[datetime], until: Optional[datetime]) -> bool:
    if since is not None and obs.timestamp < since:
        return False
    if until is not None and obs.timestamp > until:
        return False
    return True


class InMemoryObservationSource(ObservationSource):
    """Observation store held in a plain list, suitable for tests and embedding."""

    def __init__(self, observations: Iterable[Observation] = ()) -> None:
        self._observations: list[Observation] = list(observations)

    def append(self, observation: Observation) -> None:
        self._observations.append(observation)

    def fetch(
        self,
        trader_ids: Sequence[str],
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> list[Observation]:
        wanted = {trader_id.lower() for trader_id in trader_ids}
        return [obs for obs in self._observations if obs.trader_id in wanted and _in_range(obs, since, until)]


class CsvObservationSource(ObservationSource):
    """Reads a ``pnl_snapshots`` CSV export on every fetch.

    Expected columns: ``trader_address``, ``time``, ``total_pnl``.
    """

    required_columns = {"trader_address", "time", "total_pnl"}

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def fetch(
        self,
        trader_ids: Sequence[str],
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> list[Observation]:
        if not self.path.exists():
            raise FileNotFoundError(f"P&L snapshot file not found at {self.path}")

        df = pd.read_csv(self.path)
        df.columns = [str(c).strip().lower() for c in df.columns]
        missing = self.required_columns - set(df.columns)
        if missing:
            raise ValueError(f"P&L snapshot file {self.path} is missing columns {sorted(missing)}")

        df["trader_address"] = df["trader_address"].astype(str).str.strip().str.lower()
        df["time"] = pd.to_datetime(df["time"], utc=True)
        df["total_pnl"] = pd.to_numeric(df["total_pnl"], errors="coerce")
        df = df.dropna(subset=["time", "total_pnl"])

        wanted = {trader_id.lower() for trader_id in trader_ids}
        df = df[df["trader_address"].isin(wanted)]
        if since is not None:
            df = df[df["time"] >= pd.Timestamp(since)]
        if until is not None:
            df = df[df["time"] <= pd.Timestamp(until)]

        logger.debug("Observations loaded | path=%s rows=%d traders=%d", self.path, len(df), len(wanted))
        return [
            Observation(trader_id=row.trader_address, timestamp=row.time.to_pydatetime(), total_pnl=float(row.total_pnl))
            for row in df.itertuples(index=False)
        ]


__all__ = ["ObservationSource", "InMemoryObservationSource", "CsvObservationSource"]
