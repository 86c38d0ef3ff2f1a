# -*- coding: utf-8 -*-
"""
Immutable values passed between the engine components.

Nothing in the engine reads module-level state: every calculation receives an
EmployeeContext built once from the Employee row.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from hr_payroll.constants import (
    CompensationModel,
    DAYS_PER_MONTH,
    DAYS_PER_WEEK,
    DEFAULT_WORKWEEK_HOURS,
    AttendanceStatus,
)
from hr_payroll.services.schedule_service import resolve_schedule_span

ZERO = Decimal("0")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class EmployeeContext:
    employee_id: int
    code: str
    compensation_model: str
    standard_workweek_hours: Decimal = DEFAULT_WORKWEEK_HOURS
    base_salary: Decimal = ZERO
    allowance: Decimal = ZERO
    schedule_span: Optional[Decimal] = None
    date_of_birth: Optional[date] = None

    @classmethod
    def from_employee(cls, employee) -> "EmployeeContext":
        weekly = to_decimal(employee.standard_workweek_hours) or DEFAULT_WORKWEEK_HOURS
        return cls(
            employee_id=employee.pk,
            code=employee.code,
            compensation_model=employee.compensation_model,
            standard_workweek_hours=weekly,
            base_salary=to_decimal(employee.base_salary),
            allowance=to_decimal(employee.allowance),
            schedule_span=resolve_schedule_span(employee.core_working_hours),
            date_of_birth=employee.date_of_birth,
        )

    @property
    def is_fixed(self) -> bool:
        return self.compensation_model == CompensationModel.FIXED

    @property
    def daily_standard_hours(self) -> Decimal:
        return self.standard_workweek_hours / DAYS_PER_WEEK

    @property
    def daily_rate(self) -> Decimal:
        return self.base_salary / DAYS_PER_MONTH

    @property
    def hourly_rate(self) -> Decimal:
        if not self.base_salary or not self.daily_standard_hours:
            return ZERO
        return self.daily_rate / self.daily_standard_hours


@dataclass(frozen=True)
class Punches:
    time_in_am: Optional[time] = None
    time_out_am: Optional[time] = None
    time_in_pm: Optional[time] = None
    time_out_pm: Optional[time] = None

    @classmethod
    def from_record(cls, record) -> "Punches":
        return cls(record.time_in_am, record.time_out_am, record.time_in_pm, record.time_out_pm)

    @property
    def has_am(self) -> bool:
        return bool(self.time_in_am and self.time_out_am)

    @property
    def has_pm(self) -> bool:
        return bool(self.time_in_pm and self.time_out_pm)

    @property
    def has_open_session(self) -> bool:
        return bool((self.time_in_am and not self.time_out_am) or (self.time_in_pm and not self.time_out_pm))


@dataclass(frozen=True)
class DailyHours:
    am_minutes: int
    pm_minutes: int
    total_minutes: int
    lunch_added: bool = False

    @property
    def total_hours(self) -> Decimal:
        return Decimal(self.total_minutes) / Decimal(60)


@dataclass(frozen=True)
class DailyPay:
    regular_hours: Decimal = ZERO
    regular_pay: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    double_pay_bonus: Decimal = ZERO


@dataclass(frozen=True)
class DayBreakdown:
    date: date
    punches: Punches
    leave_type: str
    total_hours: Decimal
    lunch_added: bool
    status: str
    pay: DailyPay
    is_double_pay: bool
    late_minutes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        def _t(v: Optional[time]) -> Optional[str]:
            return v.strftime("%H:%M") if v else None

        return {
            "date": self.date.isoformat(),
            "time_in_am": _t(self.punches.time_in_am),
            "time_out_am": _t(self.punches.time_out_am),
            "time_in_pm": _t(self.punches.time_in_pm),
            "time_out_pm": _t(self.punches.time_out_pm),
            "leave_type": self.leave_type,
            "status": str(self.status),
            "status_display": AttendanceStatus(self.status).label,
            "total_hours": str(self.total_hours.quantize(Decimal("0.01"))),
            "lunch_added": self.lunch_added,
            "regular_hours": str(self.pay.regular_hours.quantize(Decimal("0.01"))),
            "regular_pay": str(self.pay.regular_pay.quantize(Decimal("0.01"))),
            "overtime_hours": str(self.pay.overtime_hours.quantize(Decimal("0.01"))),
            "overtime_pay": str(self.pay.overtime_pay.quantize(Decimal("0.01"))),
            "double_pay": str(self.pay.double_pay_bonus.quantize(Decimal("0.01"))),
            "is_double_pay": self.is_double_pay,
            "late_minutes": self.late_minutes,
        }


@dataclass(frozen=True)
class PeriodTotals:
    start_date: date
    end_date: date
    days: Tuple[DayBreakdown, ...] = ()

    total_days: int = 0
    total_absent: int = 0
    total_invalid: int = 0
    total_half_days: int = 0
    total_short_hours: int = 0
    total_leave_days: int = 0
    total_late_minutes: int = 0
    personal_leave_used: int = 0
    month_personal_leave_used: int = 0

    total_regular_hours: Decimal = ZERO
    total_overtime_hours: Decimal = ZERO
    total_regular_pay: Decimal = ZERO
    total_overtime_pay: Decimal = ZERO
    total_double_pay: Decimal = ZERO
    regular_pay_capped: bool = False

    is_full_month: bool = False
    allowance_multiplier: int = 1
    allowance: Decimal = ZERO

    expected_working_days: int = 0
    is_second_cutoff: bool = False
    current_period_perfect: bool = False
    sibling_period_perfect: Optional[bool] = None
    perfect_attendance_bonus: Decimal = ZERO
    unused_personal_leave: int = 0
    leave_conversion_bonus: Decimal = ZERO

    late_deduction: Decimal = ZERO
    absent_deduction: Decimal = ZERO

    @property
    def has_perfect_attendance(self) -> bool:
        return self.perfect_attendance_bonus > 0

    @property
    def bonuses(self) -> Decimal:
        return self.total_double_pay + self.perfect_attendance_bonus + self.leave_conversion_bonus


@dataclass(frozen=True)
class ContributionBreakdown:
    sss_employee: Decimal = ZERO
    sss_employer: Decimal = ZERO
    philhealth_employee: Decimal = ZERO
    philhealth_employer: Decimal = ZERO
    pagibig_employee: Decimal = ZERO
    pagibig_employer: Decimal = ZERO
    withholding_tax: Decimal = ZERO

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ContributionBreakdown":
        """
        Accepts the calculator payload:
        {"sss": {"employee", "employer"}, "philhealth": {...}, "pagibig": {...}, "withholding_tax": n}
        """
        def _share(key: str, side: str) -> Decimal:
            return to_decimal((data.get(key) or {}).get(side))

        return cls(
            sss_employee=_share("sss", "employee"),
            sss_employer=_share("sss", "employer"),
            philhealth_employee=_share("philhealth", "employee"),
            philhealth_employer=_share("philhealth", "employer"),
            pagibig_employee=_share("pagibig", "employee"),
            pagibig_employer=_share("pagibig", "employer"),
            withholding_tax=to_decimal(data.get("withholding_tax")),
        )

    @classmethod
    def from_record(cls, record) -> "ContributionBreakdown":
        return cls(
            sss_employee=record.sss_employee,
            sss_employer=record.sss_employer,
            philhealth_employee=record.philhealth_employee,
            philhealth_employer=record.philhealth_employer,
            pagibig_employee=record.pagibig_employee,
            pagibig_employer=record.pagibig_employer,
            withholding_tax=record.withholding_tax,
        )

    @property
    def employee_total(self) -> Decimal:
        return self.sss_employee + self.philhealth_employee + self.pagibig_employee + self.withholding_tax

    @property
    def employer_total(self) -> Decimal:
        return self.sss_employer + self.philhealth_employer + self.pagibig_employer

    def with_changes(self, **changes) -> "ContributionBreakdown":
        return replace(self, **changes)


@dataclass(frozen=True)
class AdvanceSummary:
    available: bool = True
    outstanding: Optional[Decimal] = ZERO
    transactions: Tuple[Dict[str, Any], ...] = ()

    @classmethod
    def unavailable(cls) -> "AdvanceSummary":
        return cls(available=False, outstanding=None)


@dataclass(frozen=True)
class PayrollToggles:
    exclude_all_deductions: bool = False
    skip_advance: bool = False
    apply_late_deduction: bool = False
    apply_absent_deduction: bool = False
    other_deductions: Decimal = ZERO


@dataclass(frozen=True)
class Reconciliation:
    contributions: ContributionBreakdown
    statutory_total: Decimal
    advance_deduction: Decimal
    outstanding_advance: Optional[Decimal]
    advance_skipped: bool
    late_deduction: Decimal
    absent_deduction: Decimal
    other_deductions: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    deductions_excluded: bool
    can_finalize: bool

    @property
    def advance_status(self) -> str:
        if self.outstanding_advance is None:
            return "unknown"
        if self.advance_skipped and self.outstanding_advance > 0:
            return "skipped"
        return "deducted" if self.advance_deduction > 0 else "none"


@dataclass(frozen=True)
class BatchPreviewItem:
    date: date
    weekday: int
    skipped: bool = False
    reason: Optional[str] = None


@dataclass
class BatchResult:
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False
    items: List[Dict[str, Any]] = field(default_factory=list)

    def add(self, day: date, outcome: str, reason: str = "", record_id: Optional[int] = None) -> None:
        self.items.append({"date": day, "outcome": outcome, "reason": reason, "record_id": record_id})
        if outcome == "created":
            self.succeeded += 1
        elif outcome == "failed":
            self.failed += 1
        else:
            self.skipped += 1


@dataclass(frozen=True)
class PayrollPeriodResult:
    """
    One employee, one pay window. Never mutated: with_toggles() rebuilds the
    reconciliation from the same inputs.
    """
    context: EmployeeContext
    start_date: date
    end_date: date
    cutoff: str
    frequency: str
    totals: PeriodTotals
    raw_contributions: ContributionBreakdown
    contributions_source: str
    advance: AdvanceSummary
    toggles: PayrollToggles
    reconciliation: Reconciliation
    senior: bool = False

    @property
    def uses_stale_contributions(self) -> bool:
        return self.contributions_source == "stale"

    @property
    def can_finalize(self) -> bool:
        return self.reconciliation.can_finalize

    @property
    def net_pay(self) -> Decimal:
        return self.reconciliation.net_pay

    def with_toggles(self, **changes) -> "PayrollPeriodResult":
        from hr_payroll.exceptions import ContributionServiceUnavailable
        from hr_payroll.services.deduction_service import reconcile

        toggles = replace(self.toggles, **changes)
        # figures were never fetched, only an exclusion can use them
        if self.contributions_source == "excluded" and not toggles.exclude_all_deductions:
            raise ContributionServiceUnavailable(
                "Contribution figures unavailable; recompute the period to apply deductions",
                employee_id=self.context.employee_id,
            )
        reconciliation = reconcile(
            self.totals, self.raw_contributions, self.advance, toggles,
            cutoff=self.cutoff, senior=self.senior,
        )
        return replace(self, toggles=toggles, reconciliation=reconciliation)
