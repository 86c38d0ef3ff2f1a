# -*- coding: utf-8 -*-
"""
Selector for AttendanceRecord / PayrollLineItem:
- normalize query params (string -> list/date)
- delegate to repositories
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from django.db.models import QuerySet
from django.utils.dateparse import parse_date

from hr_payroll.models import AttendanceRecord, PayrollLineItem
from hr_payroll.repositories import attendance_repository as repo
from hr_payroll.repositories import payroll_repository


def _as_list(v: Any) -> List[str]:
    if v is None:
        return []
    raw: List[str] = []
    if isinstance(v, (list, tuple, set)):
        for x in v:
            if x is not None:
                raw.extend(str(x).split(","))
    else:
        raw = str(v).split(",")
    return [s.strip() for s in raw if s.strip()]


def _as_int_list(v: Any) -> List[int]:
    return [int(s) for s in _as_list(v) if s.isdigit()]


def _date_or_none(v: Any):
    return parse_date(str(v)) if v else None


def filter_attendance(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[AttendanceRecord]:
    norm = {
        "employee_id": _as_int_list(filters.get("employee_id") or filters.get("employee")),
        "employee_code": _as_list(filters.get("employee_code")),
        "date_from": _date_or_none(filters.get("from") or filters.get("date_from")),
        "date_to": _date_or_none(filters.get("to") or filters.get("date_to")),
        "leave_type": _as_list(filters.get("leave_type")),
    }
    return repo.filter_records(norm, order_by=order_by)


def filter_line_items(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[PayrollLineItem]:
    norm = {
        "employee_id": _as_int_list(filters.get("employee_id") or filters.get("employee")),
        "employee_code": _as_list(filters.get("employee_code")),
        "status": _as_list(filters.get("status")),
        "date_from": _date_or_none(filters.get("from") or filters.get("date_from")),
        "date_to": _date_or_none(filters.get("to") or filters.get("date_to")),
    }
    return payroll_repository.filter_items(norm, order_by=order_by)


# Quick delegates
get_attendance_by_id = repo.get_by_id
get_line_item_by_id = payroll_repository.get_by_id
