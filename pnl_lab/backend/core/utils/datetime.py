"""Datetime helpers for the P&L Lab backend."""

from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd


def ensure_utc_datetime(value: datetime | str) -> datetime:
    """Ensure datetime values are timezone-aware in UTC."""

    if isinstance(value, str):
        iso_value = value.replace("Z", "+00:00") if value.endswith("Z") else value
        parsed = datetime.fromisoformat(iso_value)
    else:
        parsed = value
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> pd.Timestamp:
    """Current time as a UTC pandas timestamp."""

    return pd.Timestamp.now(tz="UTC")


def format_period(ts: pd.Timestamp, interval_type: str) -> str:
    """Render a bucket timestamp as a day (``2024-01-31``) or minute (``2024-01-31 13:00``) label."""

    if interval_type == "hour":
        return ts.strftime("%Y-%m-%d %H:%M")
    return ts.strftime("%Y-%m-%d")


__all__ = ["ensure_utc_datetime", "utc_now", "format_period"]
