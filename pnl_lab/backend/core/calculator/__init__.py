"""Portfolio calculator service and its request/response models."""

from pnl_lab.backend.core.calculator.models import (
    AllocationInput,
    CalculatorRequest,
    CalculatorResponse,
    DistributionRequest,
    RollingRequest,
)
from pnl_lab.backend.core.calculator.service import CalculatorService

__all__ = [
    "AllocationInput",
    "CalculatorRequest",
    "CalculatorResponse",
    "DistributionRequest",
    "RollingRequest",
    "CalculatorService",
]
