from decimal import Decimal

from django.db import models

from .mixins import TimeStampedModel

_ZERO = Decimal("0.00")


class ContributionRecord(TimeStampedModel):
    """
    Last known statutory figures for an employee, written after every
    successful calculator call and read back when the calculator is down.
    """
    employee = models.ForeignKey("hr_payroll.Employee", on_delete=models.CASCADE, related_name="contribution_records")
    applicable_month = models.DateField(help_text="First day of the month the figures apply to")
    cutoff = models.CharField(max_length=3, blank=True, default="")

    sss_employee = models.DecimalField(max_digits=12, decimal_places=2, default=_ZERO)
    sss_employer = models.DecimalField(max_digits=12, decimal_places=2, default=_ZERO)
    philhealth_employee = models.DecimalField(max_digits=12, decimal_places=2, default=_ZERO)
    philhealth_employer = models.DecimalField(max_digits=12, decimal_places=2, default=_ZERO)
    pagibig_employee = models.DecimalField(max_digits=12, decimal_places=2, default=_ZERO)
    pagibig_employer = models.DecimalField(max_digits=12, decimal_places=2, default=_ZERO)
    withholding_tax = models.DecimalField(max_digits=12, decimal_places=2, default=_ZERO)

    class Meta:
        db_table = "ContributionRecord"
        ordering = ["-applicable_month", "-created_at", "-id"]
        indexes = [models.Index(fields=["employee", "applicable_month"])]

    def __str__(self):
        return f"CONTRIB {self.employee_id} {self.applicable_month:%Y-%m} {self.cutoff}"
