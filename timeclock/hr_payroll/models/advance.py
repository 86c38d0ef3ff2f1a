from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from .mixins import TimeStampedModel


class CashAdvance(TimeStampedModel):
    """Cash-out salary advance recorded by finance; recovered from net pay."""
    employee = models.ForeignKey("hr_payroll.Employee", on_delete=models.PROTECT, related_name="cash_advances")
    date = models.DateField(db_index=True)
    amount = models.DecimalField(
        max_digits=12, decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    reference = models.CharField(max_length=64, blank=True, default="")
    note = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "CashAdvance"
        ordering = ["date", "id"]
        indexes = [models.Index(fields=["employee", "date"])]

    def __str__(self):
        return f"ADV {self.employee_id} {self.date} {self.amount}"
