# -*- coding: utf-8 -*-
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from hr_payroll.views.payroll_view import PayrollLineItemViewSet, PayrollPeriodViewSet

router = DefaultRouter()
router.register(r"periods", PayrollPeriodViewSet, basename="payroll-periods")
router.register(r"line-items", PayrollLineItemViewSet, basename="payroll-line-items")

urlpatterns = [
    path("", include(router.urls)),
]
