# -*- coding: utf-8 -*-
"""PayrollLineItem persistence (DB only)."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import QuerySet

from hr_payroll.models import PayrollLineItem


def base_qs() -> QuerySet[PayrollLineItem]:
    return PayrollLineItem.objects.select_related("employee")


def get_by_id(item_id: int) -> Optional[PayrollLineItem]:
    return base_qs().filter(id=item_id).first()


def create(data: Dict[str, Any]) -> PayrollLineItem:
    with transaction.atomic():
        return PayrollLineItem.objects.create(**data)


def update_fields(item: PayrollLineItem, changes: Dict[str, Any]) -> PayrollLineItem:
    for name, value in changes.items():
        setattr(item, name, value)
    with transaction.atomic():
        item.save(update_fields=[*changes.keys(), "updated_at"])
    return item


def delete(item: PayrollLineItem) -> None:
    with transaction.atomic():
        item.delete()


def filter_items(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[PayrollLineItem]:
    qs = base_qs()
    if (emp_ids := filters.get("employee_id")):
        qs = qs.filter(employee_id__in=emp_ids)
    if (codes := filters.get("employee_code")):
        qs = qs.filter(employee__code__in=codes)
    if (statuses := filters.get("status")):
        qs = qs.filter(status__in=statuses)
    if (d_from := filters.get("date_from")):
        qs = qs.filter(end_date__gte=d_from)
    if (d_to := filters.get("date_to")):
        qs = qs.filter(start_date__lte=d_to)
    return qs.order_by(*order_by) if order_by else qs.order_by("-end_date", "-id")
