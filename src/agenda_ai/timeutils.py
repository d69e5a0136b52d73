from __future__ import annotations

import re
from datetime import date
from typing import Optional, Union

DEFAULT_DURATION_MIN = 60

_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_DURATION = re.compile(r"^\s*(\d+)\s*(min|minutos?|h|horas?)?\s*$", re.IGNORECASE)


def normalize_clock(value: str) -> str:
    """Validate ``H:MM`` / ``HH:MM[:SS]`` and return zero-padded ``HH:MM``."""
    m = _CLOCK.match(value.strip())
    if not m:
        raise ValueError(f"invalid time: {value!r}")
    hour, minute = int(m.group(1)), int(m.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"time out of range: {value!r}")
    return f"{hour:02d}:{minute:02d}"


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_duration(value: Union[int, str, None]) -> Optional[int]:
    """Minutes from ``45``, ``"45"``, ``"30min"`` or ``"2h"``. ``None`` passes through."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("duration must be a number of minutes")
    if isinstance(value, int):
        minutes = value
    else:
        m = _DURATION.match(value)
        if not m:
            raise ValueError(f"invalid duration: {value!r}")
        minutes = int(m.group(1))
        unit = (m.group(2) or "min").lower()
        if unit.startswith("h"):
            minutes *= 60
    if minutes <= 0:
        raise ValueError("duration must be positive")
    return minutes


def format_date(iso_date: str) -> str:
    """``2026-10-18`` -> ``18/10/2026``; anything unparseable is returned unchanged."""
    try:
        return date.fromisoformat(iso_date).strftime("%d/%m/%Y")
    except (TypeError, ValueError):
        return iso_date
