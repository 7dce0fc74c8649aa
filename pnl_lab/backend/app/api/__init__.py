"""API router collection for the P&L Lab backend."""

from fastapi import APIRouter

from pnl_lab.backend.app.api import calculator, health

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(calculator.router)

__all__ = ["api_router"]
