from django.contrib import admin

from .models import AttendanceRecord, AuditLog, CashAdvance, ContributionRecord, Employee, PayrollLineItem
from .services.attendance_service import EDITABLE_FIELDS, create_attendance, update_attendance


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("code", "full_name", "department", "rate_type", "standard_workweek_hours", "base_salary", "is_active")
    list_filter = ("is_active", "department")
    search_fields = ("code", "full_name")


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ("employee", "date", "time_in_am", "time_out_am", "time_in_pm", "time_out_pm",
                    "leave_type", "total_hours_worked", "overtime_hours")
    list_filter = ("leave_type", "is_double_pay")
    search_fields = ("employee__code", "employee__full_name")
    date_hierarchy = "date"
    readonly_fields = ("total_hours_worked", "overtime_hours", "overtime_pay", "lunch_break_minutes")

    def get_readonly_fields(self, request, obj=None):
        fields = super().get_readonly_fields(request, obj)
        return (*fields, "employee", "date") if obj else fields

    def save_model(self, request, obj, form, change):
        # derived hours and the fixed-rate double pay rule live in the service
        actor = request.user.id if request.user.is_authenticated else None
        values = {name: form.cleaned_data[name] for name in EDITABLE_FIELDS if name in form.cleaned_data}
        if change:
            changed = {name: values[name] for name in form.changed_data if name in values}
            saved = update_attendance(record_id=obj.pk, actor=actor, **changed)
        else:
            saved = create_attendance(employee_id=obj.employee_id, date=obj.date, actor=actor, **values)
        obj.pk = saved.pk
        obj.refresh_from_db()


@admin.register(CashAdvance)
class CashAdvanceAdmin(admin.ModelAdmin):
    list_display = ("employee", "date", "amount", "reference")
    search_fields = ("employee__code", "reference")


@admin.register(ContributionRecord)
class ContributionRecordAdmin(admin.ModelAdmin):
    list_display = ("employee", "applicable_month", "cutoff", "sss_employee", "philhealth_employee",
                    "pagibig_employee", "withholding_tax")


@admin.register(PayrollLineItem)
class PayrollLineItemAdmin(admin.ModelAdmin):
    list_display = ("employee", "start_date", "end_date", "cutoff", "gross_pay", "total_deductions", "net_pay", "status")
    list_filter = ("status", "cutoff", "uses_stale_contributions")
    search_fields = ("employee__code",)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "actor", "action", "object_type", "object_id")
    list_filter = ("action", "object_type")
