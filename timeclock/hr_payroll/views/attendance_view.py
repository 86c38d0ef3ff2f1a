# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import date

from django.utils import timezone
from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from hr_payroll.models import AttendanceRecord
from hr_payroll.selectors.attendance_selector import filter_attendance
from hr_payroll.serializers.attendance_serializer import (
    AttendanceCreateSerializer,
    AttendanceReadSerializer,
    AttendanceUpdateSerializer,
    BatchCreateSerializer,
    BatchPreviewItemSerializer,
    BatchPreviewRequestSerializer,
    BatchResultSerializer,
    BulkDeleteResultSerializer,
    BulkDeleteSerializer,
    MonthlySummarySerializer,
    PunchSerializer,
    TodayStatusSerializer,
)
from hr_payroll.services.attendance_service import (
    PUNCH_FIELDS,
    batch_create_attendance as svc_batch_create,
    bulk_delete_attendance as svc_bulk_delete,
    create_attendance as svc_create,
    delete_attendance as svc_delete,
    monthly_summary as svc_monthly_summary,
    preview_batch as svc_preview_batch,
    record_punch as svc_record_punch,
    today_statuses as svc_today_statuses,
    update_attendance as svc_update,
)
from hr_payroll.utils.pagination import DefaultPagination
from .utils import CONFLICT, HANDLED_ERRORS, actor_of, error_response, q_date, q_int, q_str, std_errors


@extend_schema_view(
    list=extend_schema(
        tags=["Attendance"],
        summary="List attendance records",
        parameters=[
            q_int("employee_id", "Employee id(s), comma separated"),
            q_str("employee_code", "Employee code(s), comma separated"),
            q_date("from", "From date (inclusive)"),
            q_date("to", "To date (inclusive)"),
            q_str("leave_type", "none|vacation|sick|personal"),
        ],
        responses={200: AttendanceReadSerializer(many=True)},
    ),
    retrieve=extend_schema(
        tags=["Attendance"],
        summary="Attendance record by id",
        responses={200: AttendanceReadSerializer, **std_errors()},
    ),
    create=extend_schema(
        tags=["Attendance"],
        summary="Create an attendance record",
        description="One record per employee per date. Hours and overtime are derived from the punches.",
        request=AttendanceCreateSerializer,
        responses={201: AttendanceReadSerializer, **std_errors(CONFLICT)},
        examples=[
            OpenApiExample(
                "Full day",
                value={
                    "employee_code": "EMP-001",
                    "date": "2025-01-06",
                    "time_in_am": "8:00 AM",
                    "time_out_am": "12:00 PM",
                    "time_in_pm": "13:00",
                    "time_out_pm": "17:00",
                },
                request_only=True,
            )
        ],
    ),
    partial_update=extend_schema(
        tags=["Attendance"],
        summary="Edit punches, leave or remarks",
        request=AttendanceUpdateSerializer,
        responses={200: AttendanceReadSerializer, **std_errors()},
    ),

    destroy=extend_schema(
        tags=["Attendance"],
        summary="Delete an attendance record",
        responses={204: None, **std_errors()},
    ),
)
class AttendanceViewSet(
    viewsets.GenericViewSet,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
):
    queryset = AttendanceRecord.objects.select_related("employee")
    serializer_class = AttendanceReadSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = DefaultPagination
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        if self.action == "list":
            return filter_attendance(self.request.query_params)
        return super().get_queryset()

    def create(self, request):
        ser = AttendanceCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc_create(actor=actor_of(request), **ser.validated_data)
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(AttendanceReadSerializer(obj).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        ser = AttendanceUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc_update(record_id=int(pk), actor=actor_of(request), **ser.validated_data)
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(AttendanceReadSerializer(obj).data)

    def destroy(self, request, pk=None):
        try:
            svc_delete(record_id=int(pk), actor=actor_of(request))
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Attendance"],
        summary="Delete several attendance records",
        description="Unknown ids are listed under `missing`; the rest are deleted together.",
        request=BulkDeleteSerializer,
        responses={200: BulkDeleteResultSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="bulk-delete")
    def bulk_delete(self, request):
        ser = BulkDeleteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            result = svc_bulk_delete(record_ids=ser.validated_data["ids"], actor=actor_of(request))
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(BulkDeleteResultSerializer(result).data)

    # ---------- clock ----------
    @extend_schema(
        tags=["Attendance"],
        summary="Record a clock punch for today",
        request=PunchSerializer,
        responses={200: AttendanceReadSerializer, **std_errors(CONFLICT)},
    )
    @action(detail=False, methods=["post"], url_path="punch")
    def punch(self, request):
        ser = PunchSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc_record_punch(actor=actor_of(request), **ser.validated_data)
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(AttendanceReadSerializer(obj).data)

    # ---------- batch ----------
    @extend_schema(
        tags=["Attendance"],
        summary="Preview dates of a batch insert",
        request=BatchPreviewRequestSerializer,
        responses={200: BatchPreviewItemSerializer(many=True), **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="batch/preview")
    def batch_preview(self, request):
        ser = BatchPreviewRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            items = svc_preview_batch(**ser.validated_data)
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(BatchPreviewItemSerializer(items, many=True).data)

    @extend_schema(
        tags=["Attendance"],
        summary="Insert a batch of records with one punch template",
        description="Items are written one by one; the response reports succeeded / skipped / failed.",
        request=BatchCreateSerializer,
        responses={200: BatchResultSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="batch")
    def batch(self, request):
        ser = BatchCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        template = {k: data.pop(k) for k in (*PUNCH_FIELDS, "leave_type", "late_minutes", "remarks") if k in data}
        try:
            result = svc_batch_create(
                employee_id=data["employee_id"],
                dates=data["dates"],
                excluded=data.get("excluded") or [],
                template=template,
                double_pay_on_sundays=data.get("double_pay_on_sundays", False),
                actor=actor_of(request),
            )
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(BatchResultSerializer(result).data)

    # ---------- dashboards ----------
    @extend_schema(
        tags=["Attendance"],
        summary="Live status of every active employee",
        parameters=[q_date("date", "Day to show (default today)")],
        responses={200: TodayStatusSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="today")
    def today(self, request):
        raw = request.query_params.get("date")
        try:
            day = date.fromisoformat(raw) if raw else timezone.localdate()
        except ValueError as e:
            return error_response(e)
        return Response(TodayStatusSerializer(svc_today_statuses(day), many=True).data)

    @extend_schema(
        tags=["Attendance"],
        summary="Monthly attendance summary of one employee",
        parameters=[
            q_int("employee_id", "Employee id"),
            q_str("employee_code", "Employee code"),
            q_int("year", "Year", required=True),
            q_int("month", "Month 1-12", required=True),
        ],
        responses={200: MonthlySummarySerializer, **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="monthly-summary")
    def monthly_summary(self, request):
        qp = request.query_params
        try:
            summary = svc_monthly_summary(
                employee_id=int(qp["employee_id"]) if qp.get("employee_id") else None,
                employee_code=qp.get("employee_code"),
                year=int(qp.get("year") or 0),
                month=int(qp.get("month") or 0),
            )
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(MonthlySummarySerializer(summary).data)
