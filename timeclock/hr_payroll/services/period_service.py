# -*- coding: utf-8 -*-
"""
Period aggregation: per-day breakdown, totals, allowance, bonuses and the
optional late/absent figures, plus the monthly attendance summary.

Records are any objects exposing `date`, the four punch fields, `leave_type`,
`is_double_pay` and `late_minutes` (AttendanceRecord rows in practice).
"""
from __future__ import annotations

import calendar
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from hr_payroll.constants import (
    ALLOWANCE_FULL_MONTH_MULTIPLIER,
    AttendanceStatus,
    Cutoff,
    FIRST_CUTOFF_LAST_DAY,
    LeaveType,
    PayFrequency,
    PERSONAL_LEAVE_PER_MONTH,
    SECOND_CUTOFF_FIRST_DAY,
    SEMI_MONTHLY_MAX_DAYS,
    WORKED_STATUSES,
    WORKING_WEEKDAYS,
)
from hr_payroll.exceptions import InvalidDateRange
from hr_payroll.services.hours_service import compute_daily_hours
from hr_payroll.services.pay_service import compute_daily_pay
from hr_payroll.services.status_service import classify_attendance
from hr_payroll.services.types import ZERO, DayBreakdown, EmployeeContext, PeriodTotals, Punches


# ============================
# Calendar helpers
# ============================
def validate_range(start_date: date, end_date: date) -> None:
    if start_date is None or end_date is None:
        raise InvalidDateRange("start_date and end_date are required")
    if start_date > end_date:
        raise InvalidDateRange(f"start_date {start_date} is after end_date {end_date}",
                               start_date=start_date, end_date=end_date)


def last_day_of_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def is_full_month(start_date: date, end_date: date) -> bool:
    return start_date.day == 1 and end_date.day == last_day_of_month(end_date)


def cutoff_for(start_date: date) -> str:
    return Cutoff.FIRST if start_date.day <= FIRST_CUTOFF_LAST_DAY else Cutoff.SECOND


def frequency_for(start_date: date, end_date: date) -> str:
    span_days = (end_date - start_date).days + 1
    return PayFrequency.SEMI_MONTHLY if span_days <= SEMI_MONTHLY_MAX_DAYS else PayFrequency.MONTHLY


def iter_days(start_date: date, end_date: date) -> Iterable[date]:
    day = start_date
    while day <= end_date:
        yield day
        day += timedelta(days=1)


def count_working_days(start_date: date, end_date: date) -> int:
    """Mon..Sat inside [start_date, end_date]."""
    return sum(1 for d in iter_days(start_date, end_date) if d.weekday() in WORKING_WEEKDAYS)


def first_cutoff_window(end_date: date) -> Tuple[date, date]:
    return end_date.replace(day=1), end_date.replace(day=FIRST_CUTOFF_LAST_DAY)


def needs_sibling_lookup(start_date: date, end_date: date) -> bool:
    """2nd-cutoff period whose window does not already contain the whole 1st cutoff."""
    if end_date.day < SECOND_CUTOFF_FIRST_DAY:
        return False
    first_start, _ = first_cutoff_window(end_date)
    return start_date > first_start


# ============================
# Per-day evaluation
# ============================
def evaluate_day(ctx: EmployeeContext, record: Any, is_today: bool = False, live: bool = False) -> DayBreakdown:
    punches = Punches.from_record(record)
    leave_type = record.leave_type or LeaveType.NONE
    hours = compute_daily_hours(punches, ctx.daily_standard_hours, ctx.schedule_span)
    status = classify_attendance(
        punches, leave_type, hours.total_hours, ctx.daily_standard_hours,
        is_today=is_today, live=live,
    )
    is_double_pay = bool(record.is_double_pay) and not ctx.is_fixed
    pay = compute_daily_pay(ctx, hours.total_hours, status, is_double_pay)
    return DayBreakdown(
        date=record.date,
        punches=punches,
        leave_type=leave_type,
        total_hours=hours.total_hours,
        lunch_added=hours.lunch_added,
        status=status,
        pay=pay,
        is_double_pay=is_double_pay,
        late_minutes=int(record.late_minutes or 0),
    )


def _in_window(records: Iterable[Any], start_date: date, end_date: date) -> List[Any]:
    return sorted((r for r in records if start_date <= r.date <= end_date), key=lambda r: r.date)


def _is_perfect(days: Sequence[DayBreakdown], expected_days: int) -> bool:
    if expected_days <= 0:
        return False
    absent = sum(1 for d in days if d.status == AttendanceStatus.ABSENT)
    invalid = sum(1 for d in days if d.status == AttendanceStatus.INVALID)
    worked = sum(1 for d in days if d.status in WORKED_STATUSES)
    return absent == 0 and invalid == 0 and worked >= expected_days


def _personal_leaves(records: Iterable[Any]) -> int:
    return sum(1 for r in records if r.leave_type == LeaveType.PERSONAL)


# ============================
# Period aggregation
# ============================
def aggregate_period(
    ctx: EmployeeContext,
    records: Iterable[Any],
    start_date: date,
    end_date: date,
    sibling_records: Optional[Iterable[Any]] = None,
) -> PeriodTotals:
    """
    Totals for [start_date, end_date].

    sibling_records: rows of the 1st cutoff of end_date's month, needed only
    for a 2nd-cutoff window that starts after day 1. Without them the perfect
    attendance bonus is withheld.
    """
    validate_range(start_date, end_date)
    records = list(records)
    window = _in_window(records, start_date, end_date)
    days = tuple(evaluate_day(ctx, r) for r in window)

    worked = [d for d in days if d.status in WORKED_STATUSES]
    total_regular_pay = sum((d.pay.regular_pay for d in worked), ZERO)

    full_month = is_full_month(start_date, end_date)
    capped = False
    if ctx.is_fixed and full_month and total_regular_pay > ctx.base_salary:
        total_regular_pay = ctx.base_salary
        capped = True

    multiplier = ALLOWANCE_FULL_MONTH_MULTIPLIER if full_month else 1
    expected = count_working_days(start_date, end_date)
    second_cutoff = end_date.day >= SECOND_CUTOFF_FIRST_DAY

    current_perfect = _is_perfect(days, expected)
    sibling_perfect: Optional[bool] = None
    personal_used = _personal_leaves(window)
    month_personal_used = personal_used

    if second_cutoff:
        first_start, first_end = first_cutoff_window(end_date)
        if not needs_sibling_lookup(start_date, end_date):
            sibling_rows = _in_window(window, first_start, first_end)
            sibling_available = True
        elif sibling_records is not None:
            sibling_rows = _in_window(sibling_records, first_start, first_end)
            sibling_available = True
            # leaves already inside the window are counted once
            month_personal_used += _personal_leaves(r for r in sibling_rows if r.date < start_date)
        else:
            sibling_rows = []
            sibling_available = False

        if sibling_available and sibling_rows:
            sibling_days = [evaluate_day(ctx, r) for r in sibling_rows]
            sibling_perfect = _is_perfect(sibling_days, count_working_days(first_start, first_end))
        else:
            sibling_perfect = False

    perfect_bonus = ctx.daily_rate if (second_cutoff and current_perfect and sibling_perfect) else ZERO
    unused_personal = max(0, PERSONAL_LEAVE_PER_MONTH - month_personal_used) if second_cutoff else 0
    total_late = sum(d.late_minutes for d in days)
    total_absent = sum(1 for d in days if d.status == AttendanceStatus.ABSENT)

    return PeriodTotals(
        start_date=start_date,
        end_date=end_date,
        days=days,
        total_days=len(worked),
        total_absent=total_absent,
        total_invalid=sum(1 for d in days if d.status == AttendanceStatus.INVALID),
        total_half_days=sum(1 for d in days if d.status == AttendanceStatus.HALF_DAY),
        total_short_hours=sum(1 for d in days if d.status == AttendanceStatus.SHORT_HOURS),
        total_leave_days=sum(1 for d in days if d.status == AttendanceStatus.ON_LEAVE),
        total_late_minutes=total_late,
        personal_leave_used=personal_used,
        month_personal_leave_used=month_personal_used,
        total_regular_hours=sum((d.pay.regular_hours for d in worked), ZERO),
        total_overtime_hours=sum((d.pay.overtime_hours for d in worked), ZERO),
        total_regular_pay=total_regular_pay,
        total_overtime_pay=sum((d.pay.overtime_pay for d in worked), ZERO),
        total_double_pay=sum((d.pay.double_pay_bonus for d in worked), ZERO),
        regular_pay_capped=capped,
        is_full_month=full_month,
        allowance_multiplier=multiplier,
        allowance=ctx.allowance * multiplier,
        expected_working_days=expected,
        is_second_cutoff=second_cutoff,
        current_period_perfect=current_perfect,
        sibling_period_perfect=sibling_perfect,
        perfect_attendance_bonus=perfect_bonus,
        unused_personal_leave=unused_personal,
        leave_conversion_bonus=ctx.daily_rate * unused_personal,
        late_deduction=Decimal(total_late) / Decimal(60) * ctx.hourly_rate,
        absent_deduction=total_absent * ctx.daily_rate,
    )


# ============================
# Monthly summary
# ============================
def summarize_month(ctx: EmployeeContext, records: Iterable[Any]) -> Dict[str, Any]:
    """Attendance counters for a month view. Leave days count as present."""
    days = [evaluate_day(ctx, r) for r in sorted(records, key=lambda r: r.date)]
    counts = {status: 0 for status in AttendanceStatus.values}
    for d in days:
        counts[d.status] += 1

    present = sum(counts[s] for s in WORKED_STATUSES) + counts[AttendanceStatus.ON_LEAVE]
    return {
        "total_days": len(days),
        "present_days": present,
        "absent_days": counts[AttendanceStatus.ABSENT],
        "full_days": counts[AttendanceStatus.PRESENT],
        "overtime_days": counts[AttendanceStatus.OVERTIME],
        "short_hours_days": counts[AttendanceStatus.SHORT_HOURS],
        "half_days": counts[AttendanceStatus.HALF_DAY],
        "invalid_days": counts[AttendanceStatus.INVALID],
        "leave_days": counts[AttendanceStatus.ON_LEAVE],
        "total_hours": sum((d.total_hours for d in days if d.status in WORKED_STATUSES), ZERO),
        "total_overtime_hours": sum((d.pay.overtime_hours for d in days), ZERO),
        "total_overtime_pay": sum((d.pay.overtime_pay for d in days), ZERO),
        "days": days,
    }
