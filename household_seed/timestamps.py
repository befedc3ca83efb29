"""Epoch-millisecond helpers. The store keeps every instant as integer ms UTC."""

from datetime import datetime, timezone

MINUTE_MS = 60_000
HOUR_MS = 3_600_000
DAY_MS = 86_400_000


def utc_ms(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    """Epoch ms for a UTC wall-clock time. ``month`` is 1-based."""
    dt = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    return int(dt.timestamp()) * 1000


def align_to_day(ms: int) -> int:
    return (ms // DAY_MS) * DAY_MS


def format_iso(ms: int) -> str:
    """ISO-8601 instant with a ``Z`` suffix and no fractional seconds, e.g. 2024-03-10T06:00:00Z."""
    dt = datetime.fromtimestamp(ms // 1000, tz=timezone.utc)
    text = dt.strftime("%Y-%m-%dT%H:%M:%S")
    if ms % 1000:
        text += f".{ms % 1000:03d}"
    return text + "Z"
