from decimal import Decimal

from django.db import models
from django.db.models import Q, CheckConstraint

from hr_payroll.constants import Cutoff, PayFrequency
from .mixins import TimeStampedModel

_ZERO = Decimal("0.00")


def _money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, default=_ZERO, **kwargs)


class PayrollLineItem(TimeStampedModel):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        PAID = "paid", "Paid"

    employee = models.ForeignKey("hr_payroll.Employee", on_delete=models.PROTECT, related_name="payroll_items")
    start_date = models.DateField()
    end_date = models.DateField()
    cutoff = models.CharField(max_length=3, choices=Cutoff.choices)
    frequency = models.CharField(max_length=16, choices=PayFrequency.choices)

    basic_salary = _money()
    total_days = models.IntegerField(default=0)
    regular_hours = models.DecimalField(max_digits=8, decimal_places=2, default=_ZERO)
    overtime_hours = models.DecimalField(max_digits=8, decimal_places=2, default=_ZERO)

    regular_pay = _money()
    overtime_pay = _money()
    allowance = _money()
    double_pay = _money()
    perfect_attendance_bonus = _money()
    leave_conversion_bonus = _money()
    gross_pay = _money()

    sss_employee = _money()
    philhealth_employee = _money()
    pagibig_employee = _money()
    withholding_tax = _money()
    sss_employer = _money()
    philhealth_employer = _money()
    pagibig_employer = _money()

    advance_deduction = _money()
    outstanding_advance = _money()
    late_deduction = _money()
    absent_deduction = _money()
    other_deductions = _money()
    total_deductions = _money()
    net_pay = _money()

    deductions_excluded = models.BooleanField(default=False)
    advance_skipped = models.BooleanField(default=False)
    uses_stale_contributions = models.BooleanField(default=False)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    remarks = models.CharField(max_length=255, blank=True, default="")
    breakdown = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "PayrollLineItem"
        ordering = ["-end_date", "-id"]
        constraints = [
            CheckConstraint(name="payroll_dates_valid", condition=Q(end_date__gte=models.F("start_date"))),
        ]
        indexes = [models.Index(fields=["employee", "start_date", "end_date"])]

    def __str__(self):
        return f"PAY {self.employee_id} {self.start_date}→{self.end_date} [{self.get_status_display()}]"
