from datetime import time, timedelta
from types import SimpleNamespace

from hr_payroll.constants import LeaveType

CALCULATOR_PAYLOAD = {
    "sss": {"employee": "500.00", "employer": "1000.00"},
    "philhealth": {"employee": "250.00", "employer": "250.00"},
    "pagibig": {"employee": "100.00", "employer": "100.00"},
    "withholding_tax": "50.00",
}


def stub_calculator(params):
    return CALCULATOR_PAYLOAD


def t(value):
    if value is None or isinstance(value, time):
        return value
    hh, mm = value.split(":")
    return time(int(hh), int(mm))


def make_row(day, am=("08:00", "12:00"), pm=("13:00", "17:00"), leave=LeaveType.NONE, double=False, late=0):
    """In-memory attendance row for the pure engine."""
    am = am or (None, None)
    pm = pm or (None, None)
    return SimpleNamespace(
        date=day,
        time_in_am=t(am[0]), time_out_am=t(am[1]),
        time_in_pm=t(pm[0]), time_out_pm=t(pm[1]),
        leave_type=leave, is_double_pay=double, late_minutes=late,
    )


def working_days(start, end):
    """Mon..Sat between start and end inclusive."""
    day = start
    while day <= end:
        if day.weekday() != 6:
            yield day
        day += timedelta(days=1)
