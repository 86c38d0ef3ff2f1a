# -*- coding: utf-8 -*-
"""
Payroll for one employee and one pay window.

compute_payroll_period reads attendance, the contribution calculator and the
advance ledger, then hands everything to the pure engine. Degraded inputs:
- calculator down: last persisted ContributionRecord, flagged stale; none -> raise
- ledger down: advance unknown, result cannot be finalized
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Union

from django.conf import settings
from django.db import transaction

from hr_payroll.clients.contribution_client import get_calculator
from hr_payroll.constants import MONEY_PLACES
from hr_payroll.exceptions import AdvanceLedgerUnavailable, ContributionServiceUnavailable
from hr_payroll.models import PayrollLineItem
from hr_payroll.repositories import advance_repository, attendance_repository, contribution_repository
from hr_payroll.repositories import payroll_repository
from hr_payroll.services.attendance_service import _for_update, resolve_employee
from hr_payroll.services.audit_service import log_action
from hr_payroll.services.deduction_service import build_contribution_params, is_senior, reconcile
from hr_payroll.services.period_service import (
    aggregate_period,
    cutoff_for,
    first_cutoff_window,
    frequency_for,
    needs_sibling_lookup,
    validate_range,
)
from hr_payroll.services.types import (
    AdvanceSummary,
    ContributionBreakdown,
    EmployeeContext,
    PayrollPeriodResult,
    PayrollToggles,
    to_decimal,
)

logger = logging.getLogger(__name__)

SOURCE_CALCULATOR = "calculator"
SOURCE_STALE = "stale"
SOURCE_EXCLUDED = "excluded"

Calculator = Callable[[Dict[str, Any]], Dict[str, Any]]


def default_toggles(**overrides) -> PayrollToggles:
    values = {
        "apply_late_deduction": bool(getattr(settings, "PAYROLL_APPLY_LATE_DEDUCTION", False)),
        "apply_absent_deduction": bool(getattr(settings, "PAYROLL_APPLY_ABSENT_DEDUCTION", False)),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    if "other_deductions" in values:
        values["other_deductions"] = to_decimal(values["other_deductions"])
    return PayrollToggles(**values)


def _resolve_contributions(
    ctx: EmployeeContext,
    params: Dict[str, Any],
    calculator: Calculator,
    end_date: date,
    cutoff: str,
    exclude_all: bool,
):
    try:
        payload = calculator(params)
    except ContributionServiceUnavailable:
        record = contribution_repository.latest_for_employee(ctx.employee_id)
        if record is not None:
            logger.warning("[contrib] calculator unavailable, using figures of %s for emp=%s",
                           record.applicable_month, ctx.code)
            return ContributionBreakdown.from_record(record), SOURCE_STALE
        if exclude_all:
            logger.warning("[contrib] calculator unavailable, deductions excluded for emp=%s", ctx.code)
            return ContributionBreakdown(), SOURCE_EXCLUDED
        raise

    figures = ContributionBreakdown.from_mapping(payload)
    contribution_repository.save_snapshot(ctx.employee_id, end_date, cutoff, figures)
    return figures, SOURCE_CALCULATOR


def _load_advances(ctx: EmployeeContext, start_date: date, end_date: date) -> AdvanceSummary:
    try:
        entries = advance_repository.list_for_period(ctx.employee_id, start_date, end_date)
    except AdvanceLedgerUnavailable:
        logger.warning("[advance] ledger unavailable for emp=%s, finalization blocked", ctx.code)
        return AdvanceSummary.unavailable()

    outstanding = sum((e.amount for e in entries), Decimal("0"))
    return AdvanceSummary(
        available=True,
        outstanding=outstanding,
        transactions=tuple(
            {"id": e.id, "date": e.date.isoformat(), "amount": str(e.amount), "reference": e.reference}
            for e in entries
        ),
    )


def compute_payroll_period(
    *,
    employee_id: Optional[int] = None,
    employee_code: Optional[str] = None,
    start_date: date,
    end_date: date,
    toggles: Optional[Union[PayrollToggles, Dict[str, Any]]] = None,
    calculator: Optional[Calculator] = None,
) -> PayrollPeriodResult:
    validate_range(start_date, end_date)
    employee = resolve_employee(employee_id=employee_id, employee_code=employee_code)
    ctx = EmployeeContext.from_employee(employee)
    if not isinstance(toggles, PayrollToggles):
        toggles = default_toggles(**(toggles or {}))

    records = attendance_repository.list_in_range(ctx.employee_id, start_date, end_date)
    sibling_records = None
    if needs_sibling_lookup(start_date, end_date):
        first_start, first_end = first_cutoff_window(end_date)
        sibling_records = attendance_repository.list_in_range(ctx.employee_id, first_start, first_end)

    totals = aggregate_period(ctx, records, start_date, end_date, sibling_records=sibling_records)
    cutoff = cutoff_for(start_date)
    frequency = frequency_for(start_date, end_date)
    senior = is_senior(ctx, end_date)

    params = build_contribution_params(ctx, totals, cutoff, frequency)
    raw, source = _resolve_contributions(
        ctx, params, calculator or get_calculator(), end_date, cutoff, toggles.exclude_all_deductions,
    )
    advance = _load_advances(ctx, start_date, end_date)

    reconciliation = reconcile(totals, raw, advance, toggles, cutoff=cutoff, senior=senior)
    if toggles.skip_advance and advance.outstanding:
        logger.warning("[payroll] advance %s skipped for emp=%s %s..%s",
                       advance.outstanding, ctx.code, start_date, end_date)

    logger.info("[payroll] computed emp=%s %s..%s net=%s source=%s",
                ctx.code, start_date, end_date, reconciliation.net_pay, source)
    return PayrollPeriodResult(
        context=ctx,
        start_date=start_date,
        end_date=end_date,
        cutoff=cutoff,
        frequency=frequency,
        totals=totals,
        raw_contributions=raw,
        contributions_source=source,
        advance=advance,
        toggles=toggles,
        reconciliation=reconciliation,
        senior=senior,
    )


# ============================
# Output
# ============================
def _q(value: Optional[Decimal]) -> Decimal:
    return (value or Decimal("0")).quantize(MONEY_PLACES)


def _money(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(_q(value))


def result_as_dict(result: PayrollPeriodResult) -> Dict[str, Any]:
    t, r = result.totals, result.reconciliation
    c = r.contributions
    return {
        "employee_id": result.context.employee_id,
        "employee_code": result.context.code,
        "compensation_model": str(result.context.compensation_model),
        "start_date": result.start_date.isoformat(),
        "end_date": result.end_date.isoformat(),
        "cutoff": str(result.cutoff),
        "frequency": str(result.frequency),
        "daily_rate": _money(result.context.daily_rate),
        "hourly_rate": _money(result.context.hourly_rate),
        "earnings": {
            "total_days": t.total_days,
            "regular_hours": _money(t.total_regular_hours),
            "overtime_hours": _money(t.total_overtime_hours),
            "regular_pay": _money(t.total_regular_pay),
            "overtime_pay": _money(t.total_overtime_pay),
            "allowance": _money(t.allowance),
            "allowance_multiplier": t.allowance_multiplier,
            "double_pay": _money(t.total_double_pay),
            "perfect_attendance_bonus": _money(t.perfect_attendance_bonus),
            "leave_conversion_bonus": _money(t.leave_conversion_bonus),
            "total_earnings": _money(r.total_earnings),
        },
        "attendance": {
            "total_absent": t.total_absent,
            "total_invalid": t.total_invalid,
            "total_half_days": t.total_half_days,
            "total_short_hours": t.total_short_hours,
            "total_leave_days": t.total_leave_days,
            "total_late_minutes": t.total_late_minutes,
            "personal_leave_used": t.month_personal_leave_used,
            "expected_working_days": t.expected_working_days,
            "has_perfect_attendance": t.has_perfect_attendance,
        },
        "contributions": {
            "sss_employee": _money(c.sss_employee),
            "sss_employer": _money(c.sss_employer),
            "philhealth_employee": _money(c.philhealth_employee),
            "philhealth_employer": _money(c.philhealth_employer),
            "pagibig_employee": _money(c.pagibig_employee),
            "pagibig_employer": _money(c.pagibig_employer),
            "withholding_tax": _money(c.withholding_tax),
            "statutory_total": _money(r.statutory_total),
            "source": result.contributions_source,
        },
        "deductions": {
            "advance_deduction": _money(r.advance_deduction),
            "outstanding_advance": _money(r.outstanding_advance),
            "advance_status": r.advance_status,
            "late_deduction": _money(r.late_deduction),
            "absent_deduction": _money(r.absent_deduction),
            "other_deductions": _money(r.other_deductions),
            "total_deductions": _money(r.total_deductions),
        },
        "net_pay": _money(r.net_pay),
        "deductions_excluded": r.deductions_excluded,
        "advance_skipped": r.advance_skipped,
        "uses_stale_contributions": result.uses_stale_contributions,
        "can_finalize": r.can_finalize,
        "days": [d.to_dict() for d in t.days],
    }


# ============================
# Finalize
# ============================
def finalize_payroll_period(
    *,
    employee_id: Optional[int] = None,
    employee_code: Optional[str] = None,
    start_date: date,
    end_date: date,
    toggles: Optional[Union[PayrollToggles, Dict[str, Any]]] = None,
    calculator: Optional[Calculator] = None,
    remarks: str = "",
    actor: Optional[int] = None,
) -> PayrollLineItem:
    result = compute_payroll_period(
        employee_id=employee_id, employee_code=employee_code,
        start_date=start_date, end_date=end_date, toggles=toggles, calculator=calculator,
    )
    if not result.can_finalize:
        raise AdvanceLedgerUnavailable(
            "Advance ledger unavailable; payroll cannot be finalized", employee_id=result.context.employee_id,
        )

    t, r = result.totals, result.reconciliation
    c = r.contributions
    payload = result_as_dict(result)

    item = payroll_repository.create({
        "employee_id": result.context.employee_id,
        "start_date": start_date,
        "end_date": end_date,
        "cutoff": result.cutoff,
        "frequency": result.frequency,
        "basic_salary": _q(result.context.base_salary),
        "total_days": t.total_days,
        "regular_hours": _q(t.total_regular_hours),
        "overtime_hours": _q(t.total_overtime_hours),
        "regular_pay": _q(t.total_regular_pay),
        "overtime_pay": _q(t.total_overtime_pay),
        "allowance": _q(t.allowance),
        "double_pay": _q(t.total_double_pay),
        "perfect_attendance_bonus": _q(t.perfect_attendance_bonus),
        "leave_conversion_bonus": _q(t.leave_conversion_bonus),
        "gross_pay": _q(r.total_earnings),
        "sss_employee": _q(c.sss_employee),
        "philhealth_employee": _q(c.philhealth_employee),
        "pagibig_employee": _q(c.pagibig_employee),
        "withholding_tax": _q(c.withholding_tax),
        "sss_employer": _q(c.sss_employer),
        "philhealth_employer": _q(c.philhealth_employer),
        "pagibig_employer": _q(c.pagibig_employer),
        "advance_deduction": _q(r.advance_deduction),
        "outstanding_advance": _q(r.outstanding_advance),
        "late_deduction": _q(r.late_deduction),
        "absent_deduction": _q(r.absent_deduction),
        "other_deductions": _q(r.other_deductions),
        "total_deductions": _q(r.total_deductions),
        "net_pay": _q(r.net_pay),
        "deductions_excluded": r.deductions_excluded,
        "advance_skipped": r.advance_skipped,
        "uses_stale_contributions": result.uses_stale_contributions,
        "remarks": (remarks or "").strip(),
        "breakdown": {"days": payload["days"], "contributions": payload["contributions"],
                      "attendance": payload["attendance"]},
    })
    log_action(actor=actor, action="payroll.finalize", object_type="payroll_line_item", object_id=item.id,
               after={"net_pay": str(item.net_pay), "start_date": start_date.isoformat(),
                      "end_date": end_date.isoformat()})
    logger.info("[payroll] finalized emp=%s %s..%s item=%s net=%s",
                result.context.code, start_date, end_date, item.id, item.net_pay)
    return item


# ============================
# Line item maintenance
# ============================
LINE_ITEM_EDITABLE = ("status", "remarks")


def _locked_item(item_id: int) -> PayrollLineItem:
    item = _for_update(payroll_repository.base_qs()).filter(id=item_id).first()
    if item is None:
        raise PayrollLineItem.DoesNotExist(f"Payroll line item {item_id} not found")
    return item


def update_line_item(*, item_id: int, actor: Optional[int] = None, **changes) -> PayrollLineItem:
    """Move a saved item through pending/approved/paid or edit its remarks. Amounts are immutable."""
    unknown = set(changes) - set(LINE_ITEM_EDITABLE)
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")
    if "status" in changes and changes["status"] not in PayrollLineItem.Status.values:
        raise ValueError(f"Unknown status '{changes['status']}'")
    if "remarks" in changes:
        changes["remarks"] = (changes["remarks"] or "").strip()

    with transaction.atomic():
        item = _locked_item(item_id)
        before = {name: getattr(item, name) for name in changes}
        item = payroll_repository.update_fields(item, changes)

    log_action(actor=actor, action="payroll.update", object_type="payroll_line_item", object_id=item.id,
               before=before, after=dict(changes))
    logger.info("[payroll] item=%s updated %s", item.id, sorted(changes))
    return item


def delete_line_item(*, item_id: int, actor: Optional[int] = None) -> None:
    with transaction.atomic():
        item = _locked_item(item_id)
        before = {"employee_id": item.employee_id, "start_date": item.start_date.isoformat(),
                  "end_date": item.end_date.isoformat(), "net_pay": str(item.net_pay), "status": item.status}
        payroll_repository.delete(item)

    log_action(actor=actor, action="payroll.delete", object_type="payroll_line_item", object_id=item_id,
               before=before)
    logger.info("[payroll] item=%s deleted", item_id)
