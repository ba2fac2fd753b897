from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Current UTC time, truncated to milliseconds (BSON datetime precision)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def as_utc(dt: datetime) -> datetime:
    """MongoDB hands back naive datetimes that are UTC; make them aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w|y)?\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 7 * 86400,
    "y": 365.25 * 86400,
}


def parse_duration(value: str | int) -> timedelta:
    """Parse an expiry such as "15m", "1h", "7d", "1y" or plain seconds."""
    if isinstance(value, int):
        return timedelta(seconds=value)
    m = _DURATION_RE.match(str(value or ""))
    if not m:
        raise ValueError(f"invalid_duration: {value!r}")
    amount = float(m.group(1))
    unit = (m.group(2) or "s").lower()
    return timedelta(seconds=amount * _DURATION_UNITS[unit])


# The admin forms send dates as MM/DD/YYYY; ISO strings are accepted too.
_DAY_FORMATS = ("%m/%d/%Y", "%Y-%m-%d", "%Y/%m/%d")


def parse_day(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    s = str(value or "").strip()
    if not s:
        raise ValueError("day_blank")
    for fmt in _DAY_FORMATS:
        try:
            return datetime.strptime(s, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        return as_utc(datetime.fromisoformat(s.replace("Z", "+00:00")))
    except ValueError:
        raise ValueError(f"invalid_day: {s}")
