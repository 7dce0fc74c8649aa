"""Core services for the P&L Lab backend."""

from pnl_lab.backend.core.config_loader import CalculatorConfigLoader, load_settings
from pnl_lab.backend.core.errors import (
    CalculatorError,
    CalculatorValidationError,
    InsufficientDataError,
    InvalidWindowError,
)
from pnl_lab.backend.core.calculator import CalculatorService
from pnl_lab.backend.core.observations import (
    CsvObservationSource,
    InMemoryObservationSource,
    Observation,
    ObservationSource,
)

__all__ = [
    "CalculatorConfigLoader",
    "load_settings",
    "CalculatorError",
    "CalculatorValidationError",
    "InsufficientDataError",
    "InvalidWindowError",
    "CalculatorService",
    "CsvObservationSource",
    "InMemoryObservationSource",
    "Observation",
    "ObservationSource",
]
