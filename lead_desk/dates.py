"""Timestamp parsing and hour label formatting for lead records."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

LOGGER = logging.getLogger(__name__)

_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
)


def parse_lead_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a lead timestamp into a naive local :class:`datetime`.

    Timestamps carrying an offset (including a trailing ``Z``) are converted
    to local time first. Returns ``None`` for missing or unparseable values.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"

    parsed: Optional[datetime]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        LOGGER.debug("Unparseable lead timestamp %r", value)
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def lead_hour(value: Optional[str]) -> Optional[int]:
    parsed = parse_lead_datetime(value)
    return parsed.hour if parsed is not None else None


def lead_date(value: Optional[str]) -> Optional[date]:
    parsed = parse_lead_datetime(value)
    return parsed.date() if parsed is not None else None


def lead_timestamp(value: Optional[str]) -> float:
    """Seconds since the epoch, with missing timestamps pinned to ``0``."""

    parsed = parse_lead_datetime(value)
    if parsed is None:
        return 0.0
    try:
        return parsed.timestamp()
    except (OverflowError, OSError, ValueError):
        return 0.0


def format_hour(hour: int) -> str:
    """Render an hour of the day as ``"h:00 AM"``/``"h:00 PM"``."""

    hour %= 24
    hour12 = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    meridiem = "AM" if hour < 12 else "PM"
    return f"{hour12}:00 {meridiem}"


def format_hour_range(start: int, width: int) -> str:
    return f"{format_hour(start)} - {format_hour((start + width) % 24)}"


def now_local_iso() -> str:
    """Current local time in the ``YYYY-MM-DDTHH:MM`` form used by new leads."""

    return datetime.now().strftime("%Y-%m-%dT%H:%M")
