# -*- coding: utf-8 -*-
from __future__ import annotations

from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from hr_payroll.models import PayrollLineItem
from hr_payroll.selectors.attendance_selector import filter_line_items
from hr_payroll.serializers.payroll_serializer import (
    PayrollComputeSerializer,
    PayrollFinalizeSerializer,
    PayrollLineItemSerializer,
    PayrollLineItemUpdateSerializer,
    PayrollPeriodSerializer,
)
from hr_payroll.services.payroll_service import (
    compute_payroll_period as svc_compute,
    delete_line_item as svc_delete_item,
    finalize_payroll_period as svc_finalize,
    result_as_dict,
    update_line_item as svc_update_item,
)
from hr_payroll.utils.pagination import DefaultPagination
from .utils import HANDLED_ERRORS, UNAVAILABLE, actor_of, error_response, q_date, q_int, q_str, std_errors

_EXAMPLE = OpenApiExample(
    "2nd cutoff, skip advance",
    value={
        "employee_code": "EMP-001",
        "start_date": "2025-01-16",
        "end_date": "2025-01-31",
        "skip_advance": True,
    },
    request_only=True,
)


class PayrollPeriodViewSet(viewsets.ViewSet):
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        tags=["Payroll"],
        summary="Compute payroll for one employee and pay window",
        description="Nothing is persisted except the latest contribution figures.",
        request=PayrollComputeSerializer,
        responses={200: PayrollPeriodSerializer, **std_errors(UNAVAILABLE)},
        examples=[_EXAMPLE],
    )
    @action(detail=False, methods=["post"], url_path="compute")
    def compute(self, request):
        ser = PayrollComputeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        params, toggles = ser.split()
        try:
            result = svc_compute(toggles=toggles, **params)
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(result_as_dict(result))

    @extend_schema(
        tags=["Payroll"],
        summary="Compute and save a payroll line item",
        description="Refused with 503 while the advance ledger is unavailable.",
        request=PayrollFinalizeSerializer,
        responses={201: PayrollLineItemSerializer, **std_errors(UNAVAILABLE)},
        examples=[_EXAMPLE],
    )
    @action(detail=False, methods=["post"], url_path="finalize")
    def finalize(self, request):
        ser = PayrollFinalizeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        params, toggles = ser.split()
        try:
            item = svc_finalize(toggles=toggles, actor=actor_of(request), **params)
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(PayrollLineItemSerializer(item).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    list=extend_schema(
        tags=["Payroll"],
        summary="Saved payroll line items",
        parameters=[
            q_int("employee_id", "Employee id(s), comma separated"),
            q_str("employee_code", "Employee code(s), comma separated"),
            q_str("status", "pending|approved|paid"),
            q_date("from", "Periods ending on/after"),
            q_date("to", "Periods starting on/before"),
        ],
    ),
    retrieve=extend_schema(tags=["Payroll"], summary="Payroll line item by id"),
    partial_update=extend_schema(
        tags=["Payroll"],
        summary="Change status or remarks of a saved line item",
        request=PayrollLineItemUpdateSerializer,
        responses={200: PayrollLineItemSerializer, **std_errors()},
    ),
    destroy=extend_schema(
        tags=["Payroll"],
        summary="Delete a saved line item",
        responses={204: None, **std_errors()},
    ),
)
class PayrollLineItemViewSet(
    viewsets.GenericViewSet,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
):
    queryset = PayrollLineItem.objects.select_related("employee")
    serializer_class = PayrollLineItemSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = DefaultPagination
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "patch", "delete", "head", "options"]

    def get_queryset(self):
        if self.action == "list":
            return filter_line_items(self.request.query_params)
        return super().get_queryset()

    def partial_update(self, request, pk=None):
        ser = PayrollLineItemUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            item = svc_update_item(item_id=int(pk), actor=actor_of(request), **ser.validated_data)
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(PayrollLineItemSerializer(item).data)

    def destroy(self, request, pk=None):
        try:
            svc_delete_item(item_id=int(pk), actor=actor_of(request))
        except HANDLED_ERRORS as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)
