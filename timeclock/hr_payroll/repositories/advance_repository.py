# -*- coding: utf-8 -*-
"""
Advance ledger reads. Any database failure is reported as
AdvanceLedgerUnavailable so payroll can degrade instead of guessing zero.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import List

from django.db import DatabaseError

from hr_payroll.exceptions import AdvanceLedgerUnavailable
from hr_payroll.models import CashAdvance

logger = logging.getLogger(__name__)


def _window(employee_id: int, start_date: date, end_date: date):
    return CashAdvance.objects.filter(employee_id=employee_id, date__gte=start_date, date__lte=end_date)


def list_for_period(employee_id: int, start_date: date, end_date: date) -> List[CashAdvance]:
    try:
        return list(_window(employee_id, start_date, end_date).order_by("date", "id"))
    except DatabaseError as exc:
        logger.warning("[advance] ledger read failed emp=%s %s..%s: %s", employee_id, start_date, end_date, exc)
        raise AdvanceLedgerUnavailable("Advance ledger unavailable", employee_id=employee_id) from exc
