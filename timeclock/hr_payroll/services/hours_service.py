# -*- coding: utf-8 -*-
"""
Daily hours from the four punches, with the unlogged-lunch adjustment.
"""
from __future__ import annotations

from datetime import time
from decimal import Decimal
from typing import Optional

from hr_payroll.constants import LUNCH_BREAK_MINUTES
from hr_payroll.services.types import DailyHours, Punches


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _session_minutes(time_in: Optional[time], time_out: Optional[time]) -> int:
    if not (time_in and time_out):
        return 0
    return max(0, _minutes(time_out) - _minutes(time_in))


def compute_daily_hours(
    punches: Punches,
    daily_standard_hours: Decimal,
    schedule_span: Optional[Decimal] = None,
) -> DailyHours:
    am = _session_minutes(punches.time_in_am, punches.time_out_am)
    pm = _session_minutes(punches.time_in_pm, punches.time_out_pm)
    total = am + pm

    # unlogged lunch on a schedule that covers the standard day
    lunch_added = bool(
        punches.has_am
        and punches.has_pm
        and schedule_span is not None
        and schedule_span >= daily_standard_hours
        and Decimal(total) / Decimal(60) < daily_standard_hours
    )
    if lunch_added:
        total += LUNCH_BREAK_MINUTES

    return DailyHours(am_minutes=am, pm_minutes=pm, total_minutes=total, lunch_added=lunch_added)
