from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def parse_ymd(value: Optional[str]) -> Optional[date]:
    """'YYYY-MM-DD' -> date. Raises ValueError on anything else."""
    if value is None:
        return None
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def parse_ym(value: Optional[str]) -> Optional[date]:
    """'YYYY-MM' -> first day of that month. Raises ValueError on anything else."""
    if value is None:
        return None
    return datetime.strptime(value.strip(), "%Y-%m").date()


def shift_start(day: date, start_hour: int = 2) -> datetime:
    """UTC-naive opening time of the shift that belongs to `day`."""
    return datetime(day.year, day.month, day.day, start_hour)


def shift_window(day: date, start_hour: int = 2) -> tuple[datetime, datetime]:
    """[start, end) of one business day."""
    start = shift_start(day, start_hour)
    return start, start + timedelta(days=1)


def add_months(dt: datetime, months: int) -> datetime:
    """Shift a month-aligned datetime by whole months (day is kept as-is)."""
    index = dt.year * 12 + (dt.month - 1) + months
    return dt.replace(year=index // 12, month=index % 12 + 1)
