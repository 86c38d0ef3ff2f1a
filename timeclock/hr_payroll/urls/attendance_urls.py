# -*- coding: utf-8 -*-
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from hr_payroll.views.attendance_view import AttendanceViewSet

router = DefaultRouter()
router.include_root_view = False
router.register(r"", AttendanceViewSet, basename="attendance")

urlpatterns = [
    path("", include(router.urls)),
]
