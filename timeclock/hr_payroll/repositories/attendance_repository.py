# -*- coding: utf-8 -*-
"""
Repository layer for AttendanceRecord (DB only):
- filter, create, update of raw + derived columns
- uniqueness of (employee, date) surfaces as DuplicateRecord
- no business rules: services compute the derived fields
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Set

from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from hr_payroll.exceptions import DuplicateRecord
from hr_payroll.models import AttendanceRecord


# ============================
# Base queries
# ============================
def base_qs() -> QuerySet[AttendanceRecord]:
    return AttendanceRecord.objects.select_related("employee")


def get_by_id(record_id: int) -> Optional[AttendanceRecord]:
    return base_qs().filter(id=record_id).first()


def find(employee_id: int, day: date) -> Optional[AttendanceRecord]:
    return base_qs().filter(employee_id=employee_id, date=day).first()


def exists(employee_id: int, day: date) -> bool:
    return AttendanceRecord.objects.filter(employee_id=employee_id, date=day).exists()


def list_in_range(employee_id: int, start_date: date, end_date: date) -> List[AttendanceRecord]:
    return list(
        base_qs()
        .filter(employee_id=employee_id, date__gte=start_date, date__lte=end_date)
        .order_by("date")
    )


def existing_dates(employee_id: int, start_date: date, end_date: date) -> Set[date]:
    return set(
        AttendanceRecord.objects
        .filter(employee_id=employee_id, date__gte=start_date, date__lte=end_date)
        .values_list("date", flat=True)
    )


def list_for_date(day: date, employee_ids: Optional[Iterable[int]] = None) -> List[AttendanceRecord]:
    qs = base_qs().filter(date=day)
    if employee_ids is not None:
        qs = qs.filter(employee_id__in=list(employee_ids))
    return list(qs)


def filter_records(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[AttendanceRecord]:
    qs = base_qs()
    if (emp_ids := filters.get("employee_id")):
        qs = qs.filter(employee_id__in=emp_ids)
    if (codes := filters.get("employee_code")):
        qs = qs.filter(employee__code__in=codes)
    if (d_from := filters.get("date_from")):
        qs = qs.filter(date__gte=d_from)
    if (d_to := filters.get("date_to")):
        qs = qs.filter(date__lte=d_to)
    if (leave_types := filters.get("leave_type")):
        qs = qs.filter(leave_type__in=leave_types)
    return qs.order_by(*order_by) if order_by else qs.order_by("-date", "employee_id")


# ============================
# Mutations (DB only)
# ============================
def create(data: Dict[str, Any]) -> AttendanceRecord:
    """Single insert in its own atomic block; the unique constraint decides races."""
    try:
        with transaction.atomic():
            return AttendanceRecord.objects.create(**data)
    except IntegrityError as exc:
        # only the (employee, date) key is a duplicate; check violations propagate
        if not exists(data.get("employee_id"), data.get("date")):
            raise
        raise DuplicateRecord(
            f"Attendance already exists for employee {data.get('employee_id')} on {data.get('date')}",
            employee_id=data.get("employee_id"), date=data.get("date"),
        ) from exc


def update_fields(record: AttendanceRecord, changes: Dict[str, Any]) -> AttendanceRecord:
    for name, value in changes.items():
        setattr(record, name, value)
    with transaction.atomic():
        record.save(update_fields=[*changes.keys(), "updated_at"])
    return record


def delete(record: AttendanceRecord) -> None:
    with transaction.atomic():
        record.delete()


def delete_many(record_ids: Iterable[int]) -> int:
    with transaction.atomic():
        deleted, _ = AttendanceRecord.objects.filter(id__in=list(record_ids)).delete()
    return deleted
