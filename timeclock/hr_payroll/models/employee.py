from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from hr_payroll.constants import CompensationModel, FIXED_RATE_KEYWORDS
from hr_payroll.exceptions import UnparsableTime
from hr_payroll.services.schedule_service import validate_schedule_descriptor
from .mixins import TimeStampedModel


def validate_core_working_hours(value):
    try:
        validate_schedule_descriptor(value)
    except UnparsableTime as exc:
        raise ValidationError(str(exc), code=exc.code) from exc


class Employee(TimeStampedModel):
    code = models.CharField(max_length=32, unique=True)
    full_name = models.CharField(max_length=120)
    department = models.CharField(max_length=120, blank=True, default="")

    rate_type = models.CharField(max_length=64, blank=True, default="Time-based",
        help_text="Free text, e.g. 'Fixed', 'Monthly salary', 'Time-based'")
    employment_type = models.CharField(max_length=64, blank=True, default="")

    standard_workweek_hours = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("40.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    base_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    allowance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"),
        help_text="Per-cutoff allowance (doubled for a full-month period)")
    core_working_hours = models.CharField(max_length=40, blank=True, default="",
        validators=[validate_core_working_hours],
        help_text="Schedule descriptor, e.g. '8:00 AM - 5:00 PM'")
    date_of_birth = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "Employee"
        ordering = ["full_name", "code"]

    @property
    def compensation_model(self) -> str:
        rate_type = (self.rate_type or "").lower()
        emp_type = (self.employment_type or "").lower()
        if any(k in rate_type for k in FIXED_RATE_KEYWORDS) or "fixed" in emp_type:
            return CompensationModel.FIXED
        return CompensationModel.TIME_BASED

    @property
    def is_fixed_rate(self) -> bool:
        return self.compensation_model == CompensationModel.FIXED

    def __str__(self):
        return f"{self.code} - {self.full_name}"
