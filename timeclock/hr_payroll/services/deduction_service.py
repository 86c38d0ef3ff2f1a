# -*- coding: utf-8 -*-
"""
Statutory contributions, salary advance and net pay.

Rules applied to the raw calculator figures (in this order):
- employees aged SENIOR_AGE or more pay no SSS / Pag-IBIG employee share
- 1st cutoff carries only withholding tax; SSS, PhilHealth, Pag-IBIG go to the 2nd
- exclude_all_deductions zeroes every statutory figure
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from hr_payroll.constants import Cutoff, SENIOR_AGE
from hr_payroll.services.types import (
    ZERO,
    AdvanceSummary,
    ContributionBreakdown,
    EmployeeContext,
    PayrollToggles,
    PeriodTotals,
    Reconciliation,
)


def age_on(date_of_birth: Optional[date], on: date) -> Optional[int]:
    if not date_of_birth:
        return None
    years = on.year - date_of_birth.year
    if (on.month, on.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def is_senior(ctx: EmployeeContext, on: date) -> bool:
    age = age_on(ctx.date_of_birth, on)
    return age is not None and age >= SENIOR_AGE


def build_contribution_params(ctx: EmployeeContext, totals: PeriodTotals, cutoff: str, frequency: str) -> Dict[str, Any]:
    """JSON-ready request for the statutory calculator."""
    senior = is_senior(ctx, totals.end_date)
    return {
        "employee_code": ctx.code,
        "contract_salary": str(ctx.base_salary),
        "earned_salary": str(totals.total_regular_pay),
        "overtime_pay": str(totals.total_overtime_pay),
        "other_earnings": "0",
        "de_minimis_allowance": str(totals.allowance),
        "bonuses": str(totals.bonuses),
        "frequency": str(frequency),
        "cutoff": str(cutoff),
        "period_start": totals.start_date.isoformat(),
        "period_end": totals.end_date.isoformat(),
        "date_of_birth": ctx.date_of_birth.isoformat() if ctx.date_of_birth else None,
        "sss_exempt": senior,
        "pagibig_exempt": senior,
    }


def apply_contribution_policy(
    raw: ContributionBreakdown,
    cutoff: str,
    senior: bool = False,
    exclude_all: bool = False,
) -> ContributionBreakdown:
    if exclude_all:
        return ContributionBreakdown()

    effective = raw
    if senior:
        effective = effective.with_changes(sss_employee=ZERO, pagibig_employee=ZERO)
    if cutoff == Cutoff.FIRST:
        effective = effective.with_changes(
            sss_employee=ZERO, sss_employer=ZERO,
            philhealth_employee=ZERO, philhealth_employer=ZERO,
            pagibig_employee=ZERO, pagibig_employer=ZERO,
        )
    return effective


def total_earnings(totals: PeriodTotals) -> Decimal:
    return (
        totals.total_regular_pay
        + totals.total_overtime_pay
        + totals.allowance
        + totals.total_double_pay
        + totals.perfect_attendance_bonus
        + totals.leave_conversion_bonus
    )


def reconcile(
    totals: PeriodTotals,
    contributions: ContributionBreakdown,
    advance: AdvanceSummary,
    toggles: PayrollToggles,
    cutoff: str,
    senior: bool = False,
) -> Reconciliation:
    effective = apply_contribution_policy(
        contributions, cutoff, senior=senior, exclude_all=toggles.exclude_all_deductions,
    )
    statutory = effective.employee_total

    outstanding = advance.outstanding if advance.available else None
    if outstanding is None or toggles.skip_advance:
        advance_deduction = ZERO
    else:
        advance_deduction = outstanding

    late = totals.late_deduction if toggles.apply_late_deduction else ZERO
    absent = totals.absent_deduction if toggles.apply_absent_deduction else ZERO
    other = toggles.other_deductions or ZERO

    earnings = total_earnings(totals)
    deductions = statutory + advance_deduction + other + late + absent

    return Reconciliation(
        contributions=effective,
        statutory_total=statutory,
        advance_deduction=advance_deduction,
        outstanding_advance=outstanding,
        advance_skipped=bool(toggles.skip_advance),
        late_deduction=late,
        absent_deduction=absent,
        other_deductions=other,
        total_earnings=earnings,
        total_deductions=deductions,
        net_pay=earnings - deductions,
        deductions_excluded=bool(toggles.exclude_all_deductions),
        can_finalize=advance.available,
    )
