# Load all models into the hr_payroll.models namespace
from .mixins import TimeStampedModel

from .employee import Employee
from .attendance import AttendanceRecord
from .advance import CashAdvance
from .contribution import ContributionRecord
from .payroll import PayrollLineItem
from .audit import AuditLog

__all__ = [
    "TimeStampedModel",
    "Employee",
    "AttendanceRecord",
    "CashAdvance",
    "ContributionRecord",
    "PayrollLineItem",
    "AuditLog",
]
