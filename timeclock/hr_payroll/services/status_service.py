# -*- coding: utf-8 -*-
"""
Attendance status classification.

Status is never stored: callers re-derive it from punches, leave flag and the
computed hours. `live=True` is the dashboard view of today's rows.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from hr_payroll.constants import (
    AttendanceStatus,
    HALF_DAY_FACTOR,
    HOURS_TOLERANCE,
    LeaveType,
    MIN_VALID_HOURS,
)
from hr_payroll.services.types import Punches


def is_on_leave(leave_type: Optional[str]) -> bool:
    return bool(leave_type) and leave_type != LeaveType.NONE


def _live_status(punches: Punches) -> Optional[str]:
    if punches.time_in_pm and not punches.time_out_pm:
        return AttendanceStatus.WORKING
    if punches.has_am and not punches.time_in_pm:
        return AttendanceStatus.AT_LUNCH
    if punches.time_in_am and not punches.time_out_am:
        return AttendanceStatus.WORKING
    return None


def classify_attendance(
    punches: Punches,
    leave_type: Optional[str],
    total_hours: Decimal,
    daily_standard_hours: Decimal,
    is_today: bool = False,
    live: bool = False,
) -> str:
    if is_on_leave(leave_type):
        return AttendanceStatus.ON_LEAVE

    has_am, has_pm = punches.has_am, punches.has_pm

    if is_today and live and not (has_am and has_pm):
        status = _live_status(punches)
        if status:
            return status

    if not has_am and not has_pm:
        if is_today and punches.has_open_session:
            return AttendanceStatus.IN_PROGRESS
        return AttendanceStatus.ABSENT

    if has_am != has_pm:
        if is_today:
            return AttendanceStatus.IN_PROGRESS
        min_half_day = daily_standard_hours / 2 * HALF_DAY_FACTOR
        if total_hours < MIN_VALID_HOURS:
            return AttendanceStatus.INVALID
        if total_hours < min_half_day:
            return AttendanceStatus.SHORT_HOURS
        return AttendanceStatus.HALF_DAY

    if total_hours < daily_standard_hours - HOURS_TOLERANCE:
        return AttendanceStatus.SHORT_HOURS
    if total_hours > daily_standard_hours + HOURS_TOLERANCE:
        return AttendanceStatus.OVERTIME
    return AttendanceStatus.PRESENT
