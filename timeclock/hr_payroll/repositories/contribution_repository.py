# -*- coding: utf-8 -*-
"""Last-known statutory figures, used when the calculator is unreachable."""
from __future__ import annotations

from datetime import date
from typing import Optional

from hr_payroll.models import ContributionRecord


def latest_for_employee(employee_id: int) -> Optional[ContributionRecord]:
    return ContributionRecord.objects.filter(employee_id=employee_id).order_by(
        "-applicable_month", "-updated_at", "-id"
    ).first()


def save_snapshot(employee_id: int, applicable_month: date, cutoff: str, figures) -> ContributionRecord:
    record, _ = ContributionRecord.objects.update_or_create(
        employee_id=employee_id,
        applicable_month=applicable_month.replace(day=1),
        cutoff=cutoff,
        defaults={
            "sss_employee": figures.sss_employee,
            "sss_employer": figures.sss_employer,
            "philhealth_employee": figures.philhealth_employee,
            "philhealth_employer": figures.philhealth_employer,
            "pagibig_employee": figures.pagibig_employee,
            "pagibig_employer": figures.pagibig_employer,
            "withholding_tax": figures.withholding_tax,
        },
    )
    return record
