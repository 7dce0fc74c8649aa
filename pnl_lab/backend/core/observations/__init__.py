"""Observation models and sources."""

from pnl_lab.backend.core.observations.models import Observation
from pnl_lab.backend.core.observations.source import (
    CsvObservationSource,
    InMemoryObservationSource,
    ObservationSource,
)

__all__ = ["Observation", "ObservationSource", "InMemoryObservationSource", "CsvObservationSource"]
