"""Timestamp and offset coercion for export cells."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from models import to_number

OFFSET_RE = re.compile(r"([+-])(\d{2}):?(\d{2})")


def _normalize(text: str) -> str:
    value = text.strip()
    if "T" not in value and " " in value:
        value = value.replace(" ", "T", 1)
    if value.endswith("Z") or value.endswith("z"):
        value = value[:-1] + "+00:00"
    return value


def parse_utc(value: Optional[str]) -> Optional[datetime]:
    """Parse an export timestamp as a UTC instant.

    Naive text is read as UTC (never as the host's local zone).
    """
    if not value or not str(value).strip():
        return None
    try:
        dt = datetime.fromisoformat(_normalize(str(value)))
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_wall_clock(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp keeping the wall-clock reading it was written in."""
    if not value or not str(value).strip():
        return None
    try:
        dt = datetime.fromisoformat(_normalize(str(value)))
    except ValueError:
        return None
    return dt.replace(tzinfo=None)


def parse_epoch_ms_date(value: Optional[str]) -> Optional[date]:
    """Epoch milliseconds → UTC calendar date."""
    ms = to_number(value)
    if not ms:
        return None
    try:
        return (datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(milliseconds=ms)).date()
    except OverflowError:
        return None


def parse_offset_minutes(value: Optional[str]) -> int:
    """'UTC+0530', '+05:30', 'GMT-0800' → signed minutes; 0 when absent."""
    if not value:
        return 0
    match = OFFSET_RE.search(value)
    if not match:
        return 0
    sign = -1 if match.group(1) == "-" else 1
    return sign * (int(match.group(2)) * 60 + int(match.group(3)))
