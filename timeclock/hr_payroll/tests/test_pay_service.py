from datetime import date
from decimal import Decimal

from hr_payroll.constants import AttendanceStatus as S, CompensationModel, OVERTIME_MULTIPLIER
from hr_payroll.services.pay_service import compute_daily_pay, compute_overtime_fields
from hr_payroll.services.period_service import evaluate_day
from hr_payroll.services.types import EmployeeContext

from .helpers import make_row

CENT = Decimal("0.01")


def test_fixed_rate_never_earns_overtime(fixed_ctx):
    pay = compute_daily_pay(fixed_ctx, Decimal("11"), S.OVERTIME)
    assert pay.overtime_hours == 0 and pay.overtime_pay == 0
    assert pay.regular_pay == Decimal("1000")
    assert compute_overtime_fields(fixed_ctx, Decimal("11")) == (0, 0)


def test_fixed_rate_half_day_and_absent(fixed_ctx):
    half = compute_daily_pay(fixed_ctx, Decimal("4"), S.HALF_DAY)
    assert half.regular_pay == Decimal("500")
    assert half.overtime_hours == 0
    assert compute_daily_pay(fixed_ctx, Decimal("0"), S.ABSENT).regular_pay == 0
    assert compute_daily_pay(fixed_ctx, Decimal("0.2"), S.INVALID).regular_pay == 0


def test_time_based_pay(ctx):
    pay = compute_daily_pay(ctx, Decimal("9"), S.OVERTIME)
    assert pay.regular_hours == Decimal("8")
    assert pay.regular_pay == Decimal("1000")
    assert pay.overtime_hours == Decimal("1")
    assert pay.overtime_pay == Decimal("156.25")


def test_forty_hour_week_eight_hour_day():
    ctx = EmployeeContext(
        employee_id=3, code="E003", compensation_model=CompensationModel.TIME_BASED,
        standard_workweek_hours=Decimal("40"), base_salary=Decimal("30000"),
    )
    pay = compute_daily_pay(ctx, Decimal("8"), S.OVERTIME)
    assert pay.overtime_hours.quantize(CENT) == Decimal("2.29")
    assert pay.overtime_pay == pay.overtime_hours * ctx.hourly_rate * OVERTIME_MULTIPLIER
    assert pay.overtime_pay.quantize(CENT) == Decimal("500.00")


def test_double_pay_only_for_time_based(ctx, fixed_ctx):
    assert compute_daily_pay(ctx, Decimal("8"), S.PRESENT, is_double_pay=True).double_pay_bonus == Decimal("1000")
    assert compute_daily_pay(fixed_ctx, Decimal("8"), S.PRESENT, is_double_pay=True).double_pay_bonus == 0


def test_non_worked_days_earn_nothing(ctx):
    for status in (S.ABSENT, S.INVALID, S.ON_LEAVE):
        pay = compute_daily_pay(ctx, Decimal("0.2"), status)
        assert pay.regular_pay == 0 and pay.overtime_pay == 0


def test_forty_hour_week_full_punches_classify_as_overtime():
    ctx = EmployeeContext(
        employee_id=3, code="E003", compensation_model=CompensationModel.TIME_BASED,
        standard_workweek_hours=Decimal("40"), base_salary=Decimal("30000"),
    )
    day = evaluate_day(ctx, make_row(date(2025, 1, 6)))
    assert day.total_hours == Decimal("8")
    assert day.status == S.OVERTIME
    assert day.pay.overtime_hours.quantize(CENT) == Decimal("2.29")
    assert day.pay.overtime_pay == day.pay.overtime_hours * ctx.hourly_rate * OVERTIME_MULTIPLIER


def test_fixed_rate_morning_only_is_paid_half_a_day(fixed_ctx):
    day = evaluate_day(fixed_ctx, make_row(date(2025, 1, 6), pm=None))
    assert day.total_hours == Decimal("4")
    assert day.status == S.HALF_DAY
    assert day.pay.regular_pay == fixed_ctx.daily_rate / 2
    assert day.pay.overtime_hours == 0 and day.pay.overtime_pay == 0
