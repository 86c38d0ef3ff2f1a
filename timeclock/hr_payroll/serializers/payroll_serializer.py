# -*- coding: utf-8 -*-
from __future__ import annotations

from rest_framework import serializers

from hr_payroll.models import PayrollLineItem


class PayrollComputeSerializer(serializers.Serializer):
    employee_id = serializers.IntegerField(required=False)
    employee_code = serializers.CharField(required=False)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    exclude_all_deductions = serializers.BooleanField(required=False, default=False)
    skip_advance = serializers.BooleanField(required=False, default=False)
    apply_late_deduction = serializers.BooleanField(required=False, allow_null=True, default=None)
    apply_absent_deduction = serializers.BooleanField(required=False, allow_null=True, default=None)
    other_deductions = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)

    TOGGLE_FIELDS = ("exclude_all_deductions", "skip_advance", "apply_late_deduction",
                     "apply_absent_deduction", "other_deductions")

    def validate(self, attrs):
        if not attrs.get("employee_id") and not attrs.get("employee_code"):
            raise serializers.ValidationError("employee_id or employee_code is required")
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError({"end_date": "end_date must be on or after start_date"})
        return attrs

    def split(self):
        data = dict(self.validated_data)
        toggles = {k: data.pop(k) for k in self.TOGGLE_FIELDS if k in data}
        return data, toggles


class PayrollFinalizeSerializer(PayrollComputeSerializer):
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class PayrollDaySerializer(serializers.Serializer):
    date = serializers.DateField()
    status = serializers.CharField()
    status_display = serializers.CharField()
    total_hours = serializers.CharField()
    regular_pay = serializers.CharField()
    overtime_hours = serializers.CharField()
    overtime_pay = serializers.CharField()
    double_pay = serializers.CharField()


class PayrollPeriodSerializer(serializers.Serializer):
    """Shape of payroll_service.result_as_dict (documentation only)."""
    employee_id = serializers.IntegerField()
    employee_code = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    cutoff = serializers.CharField()
    frequency = serializers.CharField()
    earnings = serializers.DictField()
    attendance = serializers.DictField()
    contributions = serializers.DictField()
    deductions = serializers.DictField()
    net_pay = serializers.CharField()
    deductions_excluded = serializers.BooleanField()
    advance_skipped = serializers.BooleanField()
    uses_stale_contributions = serializers.BooleanField()
    can_finalize = serializers.BooleanField()
    days = PayrollDaySerializer(many=True)


class PayrollLineItemSerializer(serializers.ModelSerializer):
    employee_id = serializers.IntegerField(read_only=True)
    employee_code = serializers.CharField(source="employee.code", read_only=True)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = PayrollLineItem
        exclude = ["employee"]
        read_only_fields = [f.name for f in PayrollLineItem._meta.fields]


class PayrollLineItemUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PayrollLineItem.Status.choices, required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Nothing to update: send status and/or remarks")
        return attrs
