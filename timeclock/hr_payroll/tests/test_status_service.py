import pytest
from decimal import Decimal

from hr_payroll.constants import AttendanceStatus as S, LeaveType
from hr_payroll.services.status_service import classify_attendance
from hr_payroll.services.types import Punches
from hr_payroll.tests.helpers import t

STD = Decimal("8")
FULL = Punches(t("08:00"), t("12:00"), t("13:00"), t("17:00"))
AM_ONLY = Punches(t("08:00"), t("12:00"))


def classify(punches, hours, leave=LeaveType.NONE, **kw):
    return classify_attendance(punches, leave, Decimal(hours), STD, **kw)


def test_no_punches_is_absent():
    assert classify(Punches(), "0") == S.ABSENT
    assert classify(Punches(), "0", is_today=True) == S.ABSENT


def test_lone_time_in_today_is_in_progress():
    assert classify(Punches(time_in_am=t("08:00")), "0", is_today=True) == S.IN_PROGRESS
    assert classify(Punches(time_in_am=t("08:00")), "0") == S.ABSENT


@pytest.mark.parametrize("leave", [LeaveType.VACATION, LeaveType.SICK, LeaveType.PERSONAL])
def test_leave_wins_over_punches(leave):
    assert classify(FULL, "8", leave=leave) == S.ON_LEAVE


@pytest.mark.parametrize("hours, expected", [
    ("0.25", S.INVALID),
    ("2", S.SHORT_HOURS),
    ("3", S.HALF_DAY),
    ("4", S.HALF_DAY),
])
def test_single_session(hours, expected):
    assert classify(AM_ONLY, hours) == expected


def test_single_session_today_is_in_progress():
    assert classify(AM_ONLY, "4", is_today=True) == S.IN_PROGRESS


@pytest.mark.parametrize("hours, expected", [
    ("8", S.PRESENT),
    ("8.005", S.PRESENT),
    ("7.995", S.PRESENT),
    ("7.5", S.SHORT_HOURS),
    ("9", S.OVERTIME),
])
def test_both_sessions(hours, expected):
    assert classify(FULL, hours) == expected


def test_live_refinement():
    assert classify(Punches(time_in_am=t("08:00")), "0", is_today=True, live=True) == S.WORKING
    assert classify(AM_ONLY, "4", is_today=True, live=True) == S.AT_LUNCH
    afternoon = Punches(t("08:00"), t("12:00"), t("13:00"))
    assert classify(afternoon, "4", is_today=True, live=True) == S.WORKING
    assert classify(FULL, "8", is_today=True, live=True) == S.PRESENT


def test_classification_is_idempotent():
    first = classify(FULL, "9")
    assert classify(FULL, "9") == first
