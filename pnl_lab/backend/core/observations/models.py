"""Observation models supplied by the time-series store."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from pnl_lab.backend.core.utils.datetime import ensure_utc_datetime


class Observation(BaseModel):
    """A point-in-time cumulative P&L reading for one trader."""

    model_config = ConfigDict(frozen=True)

    trader_id: str
    timestamp: datetime
    total_pnl: float

    @field_validator("trader_id", mode="before")
    @classmethod
    def _normalise_trader_id(cls, value: str) -> str:
        return str(value).strip().lower()

    @field_validator("timestamp", mode="before")
    @classmethod
    def _ensure_timestamp_timezone(cls, value: datetime | str) -> datetime:
        return ensure_utc_datetime(value)


__all__ = ["Observation"]
