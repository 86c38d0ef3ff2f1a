# -*- coding: utf-8 -*-
"""Employee directory (DB only)."""
from __future__ import annotations

from typing import Optional

from django.db.models import QuerySet

from hr_payroll.models import Employee


def base_qs() -> QuerySet[Employee]:
    return Employee.objects.all()


def get_by_id(employee_id: int) -> Optional[Employee]:
    return base_qs().filter(id=employee_id).first()


def get_by_code(code: str) -> Optional[Employee]:
    return base_qs().filter(code=(code or "").strip()).first()


def list_active() -> QuerySet[Employee]:
    return base_qs().filter(is_active=True).order_by("full_name", "code")
