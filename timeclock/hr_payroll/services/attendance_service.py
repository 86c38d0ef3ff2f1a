# -*- coding: utf-8 -*-
"""
Attendance writes and reads with business rules:
- validation (employee, times, duplicate date) happens before any write
- derived columns (hours, overtime) are recomputed on every write
- double pay is forced off for fixed-rate employees
- batch insert: one transaction per item, partial success, cancellable
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional

from django.db import connection, transaction
from django.forms.models import model_to_dict
from django.utils import timezone

from hr_payroll.constants import AttendanceStatus, LeaveType, LUNCH_BREAK_MINUTES, MONEY_PLACES, PunchAction, SUNDAY
from hr_payroll.exceptions import DuplicatePunch, DuplicateRecord, InvalidDateRange, UnknownEmployee, UnparsableTime
from hr_payroll.models import AttendanceRecord, Employee
from hr_payroll.repositories import attendance_repository as repo
from hr_payroll.repositories import employee_repository
from hr_payroll.services.audit_service import log_action
from hr_payroll.services.hours_service import compute_daily_hours
from hr_payroll.services.pay_service import compute_overtime_fields
from hr_payroll.services.period_service import evaluate_day, iter_days, summarize_month, validate_range
from hr_payroll.services.schedule_service import parse_clock_time
from hr_payroll.services.types import BatchPreviewItem, BatchResult, EmployeeContext, Punches

logger = logging.getLogger(__name__)

PUNCH_FIELDS = ("time_in_am", "time_out_am", "time_in_pm", "time_out_pm")
EDITABLE_FIELDS = (*PUNCH_FIELDS, "leave_type", "is_double_pay", "late_minutes", "remarks")
ALREADY_EXISTS = "Already exists"

# time-out slot -> its time-in slot
_PAIRED_IN = {
    PunchAction.TIME_OUT_AM: PunchAction.TIME_IN_AM,
    PunchAction.TIME_OUT_PM: PunchAction.TIME_IN_PM,
}


# ========= helpers =========
def _supports_for_update() -> bool:
    return getattr(connection.features, "has_select_for_update", False)


def _for_update(qs):
    return qs.select_for_update() if _supports_for_update() else qs


def _snapshot(record: AttendanceRecord) -> Dict[str, Any]:
    data = model_to_dict(record, fields=[*EDITABLE_FIELDS, "date", "total_hours_worked", "overtime_hours", "overtime_pay"])
    return {k: (v.isoformat() if hasattr(v, "isoformat") else str(v) if isinstance(v, Decimal) else v)
            for k, v in data.items()}


def resolve_employee(*, employee_id: Optional[int] = None, employee_code: Optional[str] = None) -> Employee:
    employee = None
    if employee_id:
        employee = employee_repository.get_by_id(employee_id)
    elif employee_code:
        employee = employee_repository.get_by_code(employee_code)
    if employee is None:
        raise UnknownEmployee(f"Employee not found: {employee_id or employee_code}",
                              employee_id=employee_id, employee_code=employee_code)
    return employee


def _clean_leave_type(value: Optional[str]) -> str:
    value = (value or LeaveType.NONE).strip().lower()
    if value not in LeaveType.values:
        raise ValueError(f"Unknown leave type '{value}'")
    return value


def _clean_punches(data: Dict[str, Any]) -> Dict[str, Any]:
    return {name: parse_clock_time(data.get(name)) for name in PUNCH_FIELDS if name in data}


def derive_fields(ctx: EmployeeContext, punches: Punches, is_double_pay: bool) -> Dict[str, Any]:
    """Derived columns written alongside the raw punches."""
    hours = compute_daily_hours(punches, ctx.daily_standard_hours, ctx.schedule_span)
    overtime_hours, overtime_pay = compute_overtime_fields(ctx, hours.total_hours)
    return {
        "total_hours_worked": hours.total_hours.quantize(MONEY_PLACES),
        "overtime_hours": overtime_hours.quantize(MONEY_PLACES),
        "overtime_pay": overtime_pay.quantize(MONEY_PLACES),
        "lunch_break_minutes": LUNCH_BREAK_MINUTES if hours.lunch_added else 0,
        "is_double_pay": bool(is_double_pay) and not ctx.is_fixed,
    }


# ========= create / update =========
def create_attendance(
    *,
    employee_id: Optional[int] = None,
    employee_code: Optional[str] = None,
    date: date,
    actor: Optional[int] = None,
    **values,
) -> AttendanceRecord:
    employee = resolve_employee(employee_id=employee_id, employee_code=employee_code)
    ctx = EmployeeContext.from_employee(employee)

    punches = _clean_punches(values)
    leave_type = _clean_leave_type(values.get("leave_type"))
    late_minutes = int(values.get("late_minutes") or 0)
    if late_minutes < 0:
        raise ValueError("late_minutes must be >= 0")

    if repo.exists(employee.id, date):
        raise DuplicateRecord(f"Attendance already exists for {employee.code} on {date}",
                              employee_id=employee.id, date=date)

    data = {
        "employee_id": employee.id,
        "date": date,
        **{name: punches.get(name) for name in PUNCH_FIELDS},
        "leave_type": leave_type,
        "late_minutes": late_minutes,
        "remarks": (values.get("remarks") or "").strip(),
    }
    data.update(derive_fields(ctx, Punches(*(data[n] for n in PUNCH_FIELDS)), values.get("is_double_pay", False)))

    record = repo.create(data)
    log_action(actor=actor, action="attendance.create", object_type="attendance", object_id=record.id,
               after=_snapshot(record))
    logger.info("[attendance] created emp=%s date=%s hours=%s", employee.code, date, record.total_hours_worked)
    return record


def update_attendance(*, record_id: int, actor: Optional[int] = None, **changes) -> AttendanceRecord:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")

    punches = _clean_punches(changes)
    if "leave_type" in changes:
        changes["leave_type"] = _clean_leave_type(changes["leave_type"])
    if "late_minutes" in changes and int(changes["late_minutes"] or 0) < 0:
        raise ValueError("late_minutes must be >= 0")

    with transaction.atomic():
        record = _for_update(AttendanceRecord.objects.select_related("employee")).filter(id=record_id).first()
        if record is None:
            raise AttendanceRecord.DoesNotExist(f"Attendance {record_id} not found")
        before = _snapshot(record)

        patch: Dict[str, Any] = {**changes, **punches}
        if "remarks" in patch:
            patch["remarks"] = (patch["remarks"] or "").strip()
        if "late_minutes" in patch:
            patch["late_minutes"] = int(patch["late_minutes"] or 0)

        ctx = EmployeeContext.from_employee(record.employee)
        merged = Punches(*(patch.get(n, getattr(record, n)) for n in PUNCH_FIELDS))
        patch.update(derive_fields(ctx, merged, patch.get("is_double_pay", record.is_double_pay)))
        record = repo.update_fields(record, patch)

    log_action(actor=actor, action="attendance.update", object_type="attendance", object_id=record.id,
               before=before, after=_snapshot(record))
    return record


# ========= delete =========
def delete_attendance(*, record_id: int, actor: Optional[int] = None) -> None:
    with transaction.atomic():
        record = _for_update(AttendanceRecord.objects.select_related("employee")).filter(id=record_id).first()
        if record is None:
            raise AttendanceRecord.DoesNotExist(f"Attendance {record_id} not found")
        before = _snapshot(record)
        code = record.employee.code
        repo.delete(record)

    log_action(actor=actor, action="attendance.delete", object_type="attendance", object_id=record_id,
               before=before)
    logger.info("[attendance] deleted emp=%s date=%s", code, before["date"])


def bulk_delete_attendance(*, record_ids: Iterable[int], actor: Optional[int] = None) -> Dict[str, Any]:
    """Delete the given rows in one transaction. Unknown ids are reported, not fatal."""
    wanted = sorted({int(i) for i in record_ids})
    if not wanted:
        raise ValueError("record_ids must not be empty")

    with transaction.atomic():
        records = list(_for_update(AttendanceRecord.objects.all()).filter(id__in=wanted))
        snapshots = {r.id: _snapshot(r) for r in records}
        deleted = repo.delete_many(snapshots.keys())

    for record_id, before in snapshots.items():
        log_action(actor=actor, action="attendance.delete", object_type="attendance", object_id=record_id,
                   before=before)
    missing = [i for i in wanted if i not in snapshots]
    logger.info("[attendance] bulk delete requested=%s deleted=%s missing=%s", len(wanted), deleted, missing)
    return {"deleted": deleted, "missing": missing}


# ========= clock punches =========
def record_punch(
    *,
    employee_code: str,
    action: str,
    at: Optional[datetime] = None,
    actor: Optional[int] = None,
) -> AttendanceRecord:
    """Fill one punch slot of today's row, creating the row on the first punch."""
    if action not in PunchAction.values:
        raise ValueError(f"Unknown punch action '{action}'")
    action = PunchAction(action).value
    employee = resolve_employee(employee_code=employee_code)
    ctx = EmployeeContext.from_employee(employee)

    at = timezone.localtime(at) if at and timezone.is_aware(at) else (at or timezone.localtime())
    day, clock = at.date(), at.time().replace(second=0, microsecond=0)

    with transaction.atomic():
        record = _for_update(AttendanceRecord.objects.select_related("employee")).filter(
            employee_id=employee.id, date=day,
        ).first()

        if record is None:
            values = {name: None for name in PUNCH_FIELDS}
        else:
            values = {name: getattr(record, name) for name in PUNCH_FIELDS}

        if values[action] is not None:
            raise DuplicatePunch(f"{PunchAction(action).label} already recorded at {values[action]:%H:%M}",
                                 employee_code=employee.code, action=action)

        paired_in = _PAIRED_IN.get(action)
        if paired_in:
            if values[paired_in] is None:
                raise UnparsableTime(f"{PunchAction(action).label} recorded before {PunchAction(paired_in).label}",
                                     action=action)
            if clock < values[paired_in]:
                raise UnparsableTime(f"{PunchAction(action).label} {clock:%H:%M} is before time-in "
                                     f"{values[paired_in]:%H:%M}", action=action)

        values[action] = clock
        derived = derive_fields(ctx, Punches(*(values[n] for n in PUNCH_FIELDS)),
                                record.is_double_pay if record else False)

        if record is None:
            record = repo.create({"employee_id": employee.id, "date": day, **values, **derived})
        else:
            record = repo.update_fields(record, {action: clock, **derived})

    log_action(actor=actor, action=f"attendance.punch.{action}", object_type="attendance",
               object_id=record.id, after={"date": day.isoformat(), action: clock.strftime("%H:%M")})
    logger.info("[attendance] punch emp=%s %s %s", employee.code, action, at)
    return record


# ========= batch =========
def preview_batch(
    *,
    employee_id: int,
    start_date: date,
    end_date: date,
    weekdays: Iterable[int],
    skip_existing: bool = True,
) -> List[BatchPreviewItem]:
    """Candidate dates on the selected weekdays (Mon=0..Sun=6)."""
    validate_range(start_date, end_date)
    employee = resolve_employee(employee_id=employee_id)
    selected = {int(w) for w in weekdays}
    if not selected or not selected <= set(range(7)):
        raise InvalidDateRange("weekdays must be a non-empty subset of 0..6", weekdays=sorted(selected))

    existing = repo.existing_dates(employee.id, start_date, end_date) if skip_existing else set()
    return [
        BatchPreviewItem(
            date=day,
            weekday=day.weekday(),
            skipped=day in existing,
            reason=ALREADY_EXISTS if day in existing else None,
        )
        for day in iter_days(start_date, end_date)
        if day.weekday() in selected
    ]


def batch_create_attendance(
    *,
    employee_id: int,
    dates: Iterable[date],
    template: Optional[Dict[str, Any]] = None,
    excluded: Iterable[date] = (),
    double_pay_on_sundays: bool = False,
    should_cancel: Optional[Callable[[], bool]] = None,
    actor: Optional[int] = None,
) -> BatchResult:
    """
    Insert one record per date using the same punch template. Items are
    independent: a failure never rolls back rows already written.
    """
    employee = resolve_employee(employee_id=employee_id)
    template = dict(template or {})
    # validate the template once, before any write
    _clean_punches(template)
    _clean_leave_type(template.get("leave_type"))

    excluded = set(excluded)
    result = BatchResult()
    pending = sorted(set(dates))

    for idx, day in enumerate(pending):
        if should_cancel is not None and should_cancel():
            result.cancelled = True
            for rest in pending[idx:]:
                result.add(rest, "cancelled", "Cancelled")
            break

        if day in excluded:
            result.add(day, "skipped", "Excluded")
            continue

        values = {k: v for k, v in template.items() if k in EDITABLE_FIELDS and k != "is_double_pay"}
        values["is_double_pay"] = bool(double_pay_on_sundays and day.weekday() == SUNDAY)
        try:
            record = create_attendance(employee_id=employee.id, date=day, actor=actor, **values)
        except DuplicateRecord:
            result.add(day, "skipped", ALREADY_EXISTS)
        except Exception as exc:
            logger.exception("[attendance] batch item failed emp=%s date=%s", employee.code, day)
            result.add(day, "failed", str(exc))
        else:
            result.add(day, "created", record_id=record.id)

    logger.info("[attendance] batch emp=%s ok=%s skipped=%s failed=%s cancelled=%s",
                employee.code, result.succeeded, result.skipped, result.failed, result.cancelled)
    return result


# ========= reads =========
def today_statuses(day: Optional[date] = None) -> List[Dict[str, Any]]:
    """Live status of every active employee for `day` (defaults to today)."""
    today = timezone.localdate()
    day = day or today
    employees = list(employee_repository.list_active())
    records = {r.employee_id: r for r in repo.list_for_date(day, [e.id for e in employees])}

    rows = []
    for employee in employees:
        record = records.get(employee.id)
        if record is None:
            rows.append({"employee": employee, "record": None, "status": AttendanceStatus.NO_RECORD, "total_hours": Decimal("0")})
            continue
        breakdown = evaluate_day(EmployeeContext.from_employee(employee), record, is_today=(day == today), live=True)
        rows.append({"employee": employee, "record": record, "status": breakdown.status,
                     "total_hours": breakdown.total_hours})
    return rows


def monthly_summary(*, employee_id: Optional[int] = None, employee_code: Optional[str] = None,
                    year: int, month: int) -> Dict[str, Any]:
    employee = resolve_employee(employee_id=employee_id, employee_code=employee_code)
    try:
        first = date(int(year), int(month), 1)
    except (TypeError, ValueError) as exc:
        raise InvalidDateRange(f"Invalid month {year}-{month}") from exc
    last = (first.replace(day=28) + timedelta(days=4)).replace(day=1) - timedelta(days=1)

    ctx = EmployeeContext.from_employee(employee)
    summary = summarize_month(ctx, repo.list_in_range(employee.id, first, last))
    summary.update({"employee": employee, "year": first.year, "month": first.month})
    return summary
