# -*- coding: utf-8 -*-
"""
Per-day pay and overtime.

Fixed-rate employees earn the daily rate (half on a half day) and never
overtime. Time-based employees earn hours x hourly rate, with hours above the
daily standard paid at OVERTIME_MULTIPLIER.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Tuple

from hr_payroll.constants import AttendanceStatus, OVERTIME_MULTIPLIER, WORKED_STATUSES
from hr_payroll.services.types import ZERO, DailyPay, EmployeeContext


def compute_overtime_fields(ctx: EmployeeContext, total_hours: Decimal) -> Tuple[Decimal, Decimal]:
    """(overtime_hours, overtime_pay) persisted on the attendance row."""
    if ctx.is_fixed:
        return ZERO, ZERO
    overtime_hours = max(ZERO, total_hours - ctx.daily_standard_hours)
    return overtime_hours, overtime_hours * ctx.hourly_rate * OVERTIME_MULTIPLIER


def compute_daily_pay(
    ctx: EmployeeContext,
    total_hours: Decimal,
    status: str,
    is_double_pay: bool = False,
) -> DailyPay:
    if status not in WORKED_STATUSES:
        return DailyPay()

    std = ctx.daily_standard_hours
    if ctx.is_fixed:
        if status == AttendanceStatus.HALF_DAY:
            return DailyPay(regular_hours=std / 2, regular_pay=ctx.daily_rate / 2)
        return DailyPay(regular_hours=std, regular_pay=ctx.daily_rate)

    regular_hours = min(total_hours, std)
    regular_pay = regular_hours * ctx.hourly_rate
    overtime_hours, overtime_pay = compute_overtime_fields(ctx, total_hours)
    return DailyPay(
        regular_hours=regular_hours,
        regular_pay=regular_pay,
        overtime_hours=overtime_hours,
        overtime_pay=overtime_pay,
        double_pay_bonus=regular_pay if is_double_pay else ZERO,
    )
