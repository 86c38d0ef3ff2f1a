# -*- coding: utf-8 -*-
from __future__ import annotations

from django.utils import timezone
from rest_framework import serializers

from hr_payroll.constants import LeaveType, PunchAction
from hr_payroll.models import AttendanceRecord
from hr_payroll.services.period_service import evaluate_day
from hr_payroll.services.types import EmployeeContext


class AttendanceReadSerializer(serializers.ModelSerializer):
    employee_code = serializers.CharField(source="employee.code", read_only=True)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    leave_type_display = serializers.CharField(source="get_leave_type_display", read_only=True)
    status = serializers.SerializerMethodField()
    status_display = serializers.SerializerMethodField()

    class Meta:
        model = AttendanceRecord
        fields = [
            "id",
            "employee_id",
            "employee_code",
            "employee_name",
            "date",
            "time_in_am",
            "time_out_am",
            "time_in_pm",
            "time_out_pm",
            "leave_type",
            "leave_type_display",
            "is_double_pay",
            "late_minutes",
            "remarks",
            "total_hours_worked",
            "overtime_hours",
            "overtime_pay",
            "lunch_break_minutes",
            "status",
            "status_display",
            "created_at",
            "updated_at",
        ]

    def _day(self, obj):
        cache = self.context.setdefault("_days", {})
        if obj.pk not in cache:
            ctx = EmployeeContext.from_employee(obj.employee)
            cache[obj.pk] = evaluate_day(ctx, obj, is_today=(obj.date == timezone.localdate()))
        return cache[obj.pk]

    def get_status(self, obj) -> str:
        return str(self._day(obj).status)

    def get_status_display(self, obj) -> str:
        return self._day(obj).status.label


# ===== Writes (times as text: "08:00", "08:00:00" or "8:00 AM") =====
class _PunchFields(serializers.Serializer):
    time_in_am = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    time_out_am = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    time_in_pm = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    time_out_pm = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AttendanceCreateSerializer(_PunchFields):
    employee_id = serializers.IntegerField(required=False)
    employee_code = serializers.CharField(required=False)
    date = serializers.DateField()
    leave_type = serializers.ChoiceField(choices=LeaveType.choices, required=False, default=LeaveType.NONE)
    is_double_pay = serializers.BooleanField(required=False, default=False)
    late_minutes = serializers.IntegerField(required=False, min_value=0, default=0)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if not attrs.get("employee_id") and not attrs.get("employee_code"):
            raise serializers.ValidationError("employee_id or employee_code is required")
        return attrs


class AttendanceUpdateSerializer(_PunchFields):
    leave_type = serializers.ChoiceField(choices=LeaveType.choices, required=False)
    is_double_pay = serializers.BooleanField(required=False)
    late_minutes = serializers.IntegerField(required=False, min_value=0)
    remarks = serializers.CharField(required=False, allow_blank=True)


class PunchSerializer(serializers.Serializer):
    employee_code = serializers.CharField()
    action = serializers.ChoiceField(choices=PunchAction.choices)


# ===== Batch =====
class BatchPreviewRequestSerializer(serializers.Serializer):
    employee_id = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    weekdays = serializers.ListField(child=serializers.IntegerField(min_value=0, max_value=6), allow_empty=False,
                                     help_text="Mon=0 .. Sun=6")
    skip_existing = serializers.BooleanField(required=False, default=True)


class BatchPreviewItemSerializer(serializers.Serializer):
    date = serializers.DateField()
    weekday = serializers.IntegerField()
    skipped = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)


class BatchCreateSerializer(_PunchFields):
    employee_id = serializers.IntegerField()
    dates = serializers.ListField(child=serializers.DateField(), allow_empty=False)
    excluded = serializers.ListField(child=serializers.DateField(), required=False, default=list)
    leave_type = serializers.ChoiceField(choices=LeaveType.choices, required=False, default=LeaveType.NONE)
    late_minutes = serializers.IntegerField(required=False, min_value=0, default=0)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    double_pay_on_sundays = serializers.BooleanField(required=False, default=False)


class BatchResultItemSerializer(serializers.Serializer):
    date = serializers.DateField()
    outcome = serializers.CharField()
    reason = serializers.CharField(allow_blank=True)
    record_id = serializers.IntegerField(allow_null=True)


class BatchResultSerializer(serializers.Serializer):
    succeeded = serializers.IntegerField()
    skipped = serializers.IntegerField()
    failed = serializers.IntegerField()
    cancelled = serializers.BooleanField()
    items = BatchResultItemSerializer(many=True)


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)


class BulkDeleteResultSerializer(serializers.Serializer):
    deleted = serializers.IntegerField()
    missing = serializers.ListField(child=serializers.IntegerField())


# ===== Reads =====
class TodayStatusSerializer(serializers.Serializer):
    employee_id = serializers.IntegerField(source="employee.id")
    employee_code = serializers.CharField(source="employee.code")
    employee_name = serializers.CharField(source="employee.full_name")
    department = serializers.CharField(source="employee.department")
    record_id = serializers.SerializerMethodField()
    status = serializers.CharField()
    status_display = serializers.SerializerMethodField()
    total_hours = serializers.DecimalField(max_digits=6, decimal_places=2)

    def get_record_id(self, row) -> int | None:
        return row["record"].id if row["record"] else None

    def get_status_display(self, row) -> str:
        return row["status"].label


class MonthlySummarySerializer(serializers.Serializer):
    employee_id = serializers.IntegerField(source="employee.id")
    employee_code = serializers.CharField(source="employee.code")
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    total_days = serializers.IntegerField()
    present_days = serializers.IntegerField()
    absent_days = serializers.IntegerField()
    full_days = serializers.IntegerField()
    overtime_days = serializers.IntegerField()
    short_hours_days = serializers.IntegerField()
    half_days = serializers.IntegerField()
    invalid_days = serializers.IntegerField()
    leave_days = serializers.IntegerField()
    total_hours = serializers.DecimalField(max_digits=8, decimal_places=2)
    total_overtime_hours = serializers.DecimalField(max_digits=8, decimal_places=2)
    total_overtime_pay = serializers.DecimalField(max_digits=12, decimal_places=2)
