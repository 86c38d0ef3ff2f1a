from decimal import Decimal

from django.db import models
from django.db.models import Q, CheckConstraint, UniqueConstraint

from hr_payroll.constants import LeaveType
from .mixins import TimeStampedModel


class AttendanceRecord(TimeStampedModel):
    """
    One row per employee per calendar date. Status is not stored: it is
    re-derived from the punches, the leave flag and the employee's rate type.
    """
    employee = models.ForeignKey("hr_payroll.Employee", on_delete=models.PROTECT, related_name="attendance_records")
    date = models.DateField(db_index=True)

    time_in_am = models.TimeField(null=True, blank=True)
    time_out_am = models.TimeField(null=True, blank=True)
    time_in_pm = models.TimeField(null=True, blank=True)
    time_out_pm = models.TimeField(null=True, blank=True)

    leave_type = models.CharField(max_length=16, choices=LeaveType.choices, default=LeaveType.NONE)
    is_double_pay = models.BooleanField(default=False, help_text="Ignored (forced False) for fixed-rate employees")
    late_minutes = models.PositiveIntegerField(default=0)
    remarks = models.CharField(max_length=255, blank=True, default="")

    # derived, recomputed on every write
    total_hours_worked = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0.00"))
    overtime_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0.00"))
    overtime_pay = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    lunch_break_minutes = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "AttendanceRecord"
        ordering = ["date", "employee_id"]
        constraints = [
            UniqueConstraint(fields=["employee", "date"], name="uniq_attendance_employee_date"),
            CheckConstraint(name="attn_hours_not_negative", condition=Q(total_hours_worked__gte=0)),
            CheckConstraint(name="attn_overtime_not_negative", condition=Q(overtime_hours__gte=0) & Q(overtime_pay__gte=0)),
        ]
        indexes = [
            models.Index(fields=["employee", "date"]),
            models.Index(fields=["leave_type"]),
        ]

    def __str__(self):
        return f"ATTD {self.employee_id} {self.date}"
