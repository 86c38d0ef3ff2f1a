from django.apps import AppConfig


class HrPayrollConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'hr_payroll'
    verbose_name = 'HR Payroll (Time Clock • Attendance • Payroll)'
