# -*- coding: utf-8 -*-
"""
Business constants and choice enums shared by models, services and serializers.
"""
from decimal import Decimal

from django.db import models

# ===== Rates & divisors =====
DAYS_PER_MONTH = Decimal("30")
DAYS_PER_WEEK = Decimal("7")
DEFAULT_WORKWEEK_HOURS = Decimal("40")
OVERTIME_MULTIPLIER = Decimal("1.25")

# ===== Status thresholds (hours) =====
MIN_VALID_HOURS = Decimal("0.5")
HALF_DAY_FACTOR = Decimal("0.75")
HOURS_TOLERANCE = Decimal("0.01")
LUNCH_BREAK_MINUTES = 60

# ===== Bonuses =====
PERSONAL_LEAVE_PER_MONTH = 1
ALLOWANCE_FULL_MONTH_MULTIPLIER = 2
FIRST_CUTOFF_LAST_DAY = 15
SECOND_CUTOFF_FIRST_DAY = 16
SEMI_MONTHLY_MAX_DAYS = 16

# ===== Statutory =====
SENIOR_AGE = 60

# Mon..Sat (date.weekday(): Mon=0 .. Sun=6)
WORKING_WEEKDAYS = frozenset({0, 1, 2, 3, 4, 5})
SUNDAY = 6

MONEY_PLACES = Decimal("0.01")

FIXED_RATE_KEYWORDS = ("fixed", "monthly", "salary")


class CompensationModel(models.TextChoices):
    FIXED = "fixed", "Fixed"
    TIME_BASED = "time_based", "Time-based"


class LeaveType(models.TextChoices):
    NONE = "none", "None"
    VACATION = "vacation", "Vacation"
    SICK = "sick", "Sick"
    PERSONAL = "personal", "Personal"


class AttendanceStatus(models.TextChoices):
    PRESENT = "present", "Present"
    OVERTIME = "overtime", "Overtime"
    SHORT_HOURS = "short_hours", "Short Hours"
    HALF_DAY = "half_day", "Half Day"
    ABSENT = "absent", "Absent"
    INVALID = "invalid", "Invalid"
    ON_LEAVE = "on_leave", "On Leave"
    # live-only states, never persisted
    IN_PROGRESS = "in_progress", "In Progress"
    WORKING = "working", "Working"
    AT_LUNCH = "at_lunch", "At Lunch"
    NO_RECORD = "no_record", "No Record"


# Days that count toward worked totals in a period
WORKED_STATUSES = frozenset({
    AttendanceStatus.PRESENT,
    AttendanceStatus.OVERTIME,
    AttendanceStatus.SHORT_HOURS,
    AttendanceStatus.HALF_DAY,
})

TRANSIENT_STATUSES = frozenset({
    AttendanceStatus.IN_PROGRESS,
    AttendanceStatus.WORKING,
    AttendanceStatus.AT_LUNCH,
    AttendanceStatus.NO_RECORD,
})


class Cutoff(models.TextChoices):
    FIRST = "1st", "1st cutoff (1-15)"
    SECOND = "2nd", "2nd cutoff (16-end)"


class PayFrequency(models.TextChoices):
    SEMI_MONTHLY = "semi-monthly", "Semi-monthly"
    MONTHLY = "monthly", "Monthly"


class PunchAction(models.TextChoices):
    TIME_IN_AM = "time_in_am", "Morning Time In"
    TIME_OUT_AM = "time_out_am", "Morning Time Out"
    TIME_IN_PM = "time_in_pm", "Afternoon Time In"
    TIME_OUT_PM = "time_out_pm", "Afternoon Time Out"
