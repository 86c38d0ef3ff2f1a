# -*- coding: utf-8 -*-
"""
Schedule descriptors and clock times.

- resolve_schedule_span: "8:00 AM - 5:00 PM" -> Decimal hours, None when unusable
- parse_clock_time: user/device supplied punch text -> datetime.time
"""
from __future__ import annotations

import re
from datetime import datetime, time
from decimal import Decimal
from typing import Any, Optional, Tuple

from hr_payroll.exceptions import UnparsableTime

_CLOCK_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*(AM|PM)\s*$", re.IGNORECASE)
_CLOCK_24H_FORMATS = ("%H:%M", "%H:%M:%S")
_NOT_SET = {"", "n/a", "na", "none", "-"}


def _parse_12h(text: str) -> Optional[Tuple[int, int]]:
    m = _CLOCK_12H.match(text)
    if not m:
        return None
    hour, minute, meridiem = int(m.group(1)), int(m.group(2)), m.group(3).upper()
    if not 1 <= hour <= 12 or minute > 59:
        return None
    if meridiem == "AM":
        hour = 0 if hour == 12 else hour
    elif hour != 12:
        hour += 12
    return hour, minute


def resolve_schedule_span(descriptor: Optional[str]) -> Optional[Decimal]:
    """
    Length in hours of a "start - end" schedule, or None if the descriptor is
    missing or malformed. Never raises.
    """
    if descriptor is None:
        return None
    text = str(descriptor).strip()
    if text.lower() in _NOT_SET:
        return None

    parts = text.split("-")
    if len(parts) != 2:
        return None

    start = _parse_12h(parts[0])
    end = _parse_12h(parts[1])
    if start is None or end is None:
        return None

    minutes = (end[0] * 60 + end[1]) - (start[0] * 60 + start[1])
    return Decimal(minutes) / Decimal(60)


def validate_schedule_descriptor(descriptor: Optional[str]) -> None:
    text = (descriptor or "").strip()
    if text.lower() in _NOT_SET:
        return
    if resolve_schedule_span(text) is None:
        raise UnparsableTime(f"Invalid working hours '{text}', expected 'H:MM AM - H:MM PM'", value=text)


def parse_clock_time(value: Any) -> Optional[time]:
    """Accepts time objects, 'HH:MM', 'HH:MM:SS' or 'H:MM AM/PM'. Empty -> None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.time().replace(microsecond=0)
    if isinstance(value, time):
        return value.replace(microsecond=0)

    text = str(value).strip()
    if not text:
        return None

    parsed = _parse_12h(text)
    if parsed is not None:
        return time(parsed[0], parsed[1])

    for fmt in _CLOCK_24H_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise UnparsableTime(f"Cannot parse time '{text}'", value=text)
