import pytest
from datetime import date, time
from decimal import Decimal

from django.core.cache import cache

from hr_payroll.constants import CompensationModel
from hr_payroll.models import AttendanceRecord, Employee
from hr_payroll.services.types import EmployeeContext

from .helpers import working_days


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def ctx():
    """Time-based, 8h standard day, daily rate 1000, hourly 125."""
    return EmployeeContext(
        employee_id=1, code="E001", compensation_model=CompensationModel.TIME_BASED,
        standard_workweek_hours=Decimal("56"), base_salary=Decimal("30000"), allowance=Decimal("500"),
    )


@pytest.fixture
def fixed_ctx():
    return EmployeeContext(
        employee_id=2, code="E002", compensation_model=CompensationModel.FIXED,
        standard_workweek_hours=Decimal("56"), base_salary=Decimal("30000"), allowance=Decimal("500"),
    )


@pytest.fixture
def employee(db):
    return Employee.objects.create(
        code="E001", full_name="Juan Dela Cruz", department="Ops",
        rate_type="Time-based", standard_workweek_hours=Decimal("56"),
        base_salary=Decimal("30000.00"), allowance=Decimal("500.00"),
        core_working_hours="8:00 AM - 5:00 PM", date_of_birth=date(1990, 5, 1),
    )


@pytest.fixture
def fixed_employee(db):
    return Employee.objects.create(
        code="E002", full_name="Maria Santos", department="Admin",
        rate_type="Monthly salary", standard_workweek_hours=Decimal("56"),
        base_salary=Decimal("30000.00"), allowance=Decimal("500.00"),
    )


@pytest.fixture
def full_days(db):
    """Create full 8h days (Mon..Sat) for an employee over [start, end]."""
    def _create(emp, start, end):
        rows = []
        for day in working_days(start, end):
            rows.append(AttendanceRecord.objects.create(
                employee=emp, date=day,
                time_in_am=time(8, 0), time_out_am=time(12, 0),
                time_in_pm=time(13, 0), time_out_pm=time(17, 0),
                total_hours_worked=Decimal("8.00"),
            ))
        return rows
    return _create
