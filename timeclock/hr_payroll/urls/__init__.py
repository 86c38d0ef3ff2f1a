# hr_payroll/urls/__init__.py
from django.urls import include, path

urlpatterns = [
    path("attendance/", include("hr_payroll.urls.attendance_urls")),
    path("", include("hr_payroll.urls.payroll_urls")),
]
