"""Portfolio calculator endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from pnl_lab.backend.core.analytics.models import DistributionSummary, RollingAnalysisResult
from pnl_lab.backend.core.calculator import (
    CalculatorRequest,
    CalculatorResponse,
    CalculatorService,
    DistributionRequest,
    RollingRequest,
)
from pnl_lab.backend.core.config_loader import load_settings
from pnl_lab.backend.core.errors import CalculatorValidationError
from pnl_lab.backend.core.observations import CsvObservationSource

logger = logging.getLogger("pnl_lab")

router = APIRouter(prefix="/calculator", tags=["calculator"])


def get_calculator_service() -> CalculatorService:
    """Build a calculator service reading the configured snapshot export."""

    settings = load_settings()
    return CalculatorService(source=CsvObservationSource(settings.observations_csv), settings=settings)


@router.post("", response_model=CalculatorResponse)
def calculate(
    request: CalculatorRequest,
    service: CalculatorService = Depends(get_calculator_service),
) -> CalculatorResponse:
    """Compute metrics for each requested window."""

    try:
        return service.calculate(request)
    except CalculatorValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Calculator request failed | windows=%s", request.windows)
        raise HTTPException(status_code=500, detail="Failed to calculate metrics") from exc


@router.post("/rolling", response_model=RollingAnalysisResult)
def calculate_rolling(
    request: RollingRequest,
    service: CalculatorService = Depends(get_calculator_service),
) -> RollingAnalysisResult:
    """Run a rolling-window analysis for one window size."""

    try:
        return service.calculate_rolling(request)
    except CalculatorValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Rolling calculator request failed | window=%s", request.window)
        raise HTTPException(status_code=500, detail="Failed to calculate rolling metrics") from exc


@router.post("/distribution", response_model=DistributionSummary)
def summarize_distribution(
    request: DistributionRequest,
    service: CalculatorService = Depends(get_calculator_service),
) -> DistributionSummary:
    """Histogram and statistics for one metric of rolling samples."""

    try:
        return service.summarize_distribution(request)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


__all__ = ["router", "get_calculator_service"]
