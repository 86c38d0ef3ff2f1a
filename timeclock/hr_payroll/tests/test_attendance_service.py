# -*- coding: utf-8 -*-
from datetime import date, datetime, time
from decimal import Decimal

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.test import RequestFactory, TestCase, override_settings
from django.utils import timezone

from hr_payroll.constants import AttendanceStatus, LeaveType, PunchAction
from hr_payroll.exceptions import DuplicatePunch, DuplicateRecord, UnknownEmployee, UnparsableTime
from hr_payroll.admin import AttendanceRecordAdmin
from hr_payroll.models import AttendanceRecord, AuditLog, Employee
from hr_payroll.repositories import attendance_repository
from hr_payroll.services.attendance_service import (
    batch_create_attendance,
    bulk_delete_attendance,
    create_attendance,
    delete_attendance,
    monthly_summary,
    preview_batch,
    record_punch,
    today_statuses,
    update_attendance,
)

FULL_DAY = {"time_in_am": "08:00", "time_out_am": "12:00", "time_in_pm": "1:00 PM", "time_out_pm": "5:00 PM"}


def aware(dt: datetime) -> datetime:
    return timezone.make_aware(dt, timezone.get_current_timezone()) if timezone.is_naive(dt) else dt


@override_settings(USE_TZ=True, TIME_ZONE="Asia/Manila")
class AttendanceServiceTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.emp = Employee.objects.create(
            code="E001", full_name="Juan Dela Cruz", rate_type="Time-based",
            standard_workweek_hours=Decimal("56"), base_salary=Decimal("30000.00"),
        )
        cls.fixed = Employee.objects.create(
            code="E002", full_name="Maria Santos", rate_type="Fixed",
            standard_workweek_hours=Decimal("56"), base_salary=Decimal("30000.00"),
        )
        cls.d = date(2025, 1, 6)  # Monday

    # ---------- create / update ----------
    def test_create_derives_hours_and_overtime(self):
        rec = create_attendance(employee_code="E001", date=self.d, **{**FULL_DAY, "time_out_pm": "18:00"})
        self.assertEqual(rec.total_hours_worked, Decimal("9.00"))
        self.assertEqual(rec.overtime_hours, Decimal("1.00"))
        self.assertEqual(rec.overtime_pay, Decimal("156.25"))
        self.assertEqual(rec.time_in_pm, time(13, 0))
        self.assertTrue(AuditLog.objects.filter(action="attendance.create", object_id=str(rec.id)).exists())

    def test_fixed_rate_forces_double_pay_off(self):
        rec = create_attendance(employee_id=self.fixed.id, date=self.d, is_double_pay=True,
                                **{**FULL_DAY, "time_out_pm": "19:00"})
        self.assertFalse(rec.is_double_pay)
        self.assertEqual(rec.overtime_hours, Decimal("0.00"))
        self.assertEqual(rec.overtime_pay, Decimal("0.00"))

    def test_duplicate_date_is_rejected(self):
        create_attendance(employee_id=self.emp.id, date=self.d, **FULL_DAY)
        with self.assertRaises(DuplicateRecord):
            create_attendance(employee_id=self.emp.id, date=self.d, **FULL_DAY)
        self.assertEqual(AttendanceRecord.objects.filter(employee=self.emp, date=self.d).count(), 1)

    def test_validation_happens_before_write(self):
        with self.assertRaises(UnknownEmployee):
            create_attendance(employee_code="NOPE", date=self.d, **FULL_DAY)
        with self.assertRaises(UnparsableTime):
            create_attendance(employee_id=self.emp.id, date=self.d, time_in_am="8 o'clock")
        with self.assertRaises(ValueError):
            create_attendance(employee_id=self.emp.id, date=self.d, leave_type="maternity")
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_update_recomputes_derived_fields(self):
        rec = create_attendance(employee_id=self.emp.id, date=self.d, **{**FULL_DAY, "time_out_pm": "18:00"})
        rec = update_attendance(record_id=rec.id, time_out_pm="17:00", remarks=" fixed punch ")
        self.assertEqual(rec.total_hours_worked, Decimal("8.00"))
        self.assertEqual(rec.overtime_hours, Decimal("0.00"))
        self.assertEqual(rec.remarks, "fixed punch")
        log = AuditLog.objects.get(action="attendance.update", object_id=str(rec.id))
        self.assertEqual(log.before["time_out_pm"], "18:00:00")

    def test_update_rejects_unknown_fields_and_missing_record(self):
        rec = create_attendance(employee_id=self.emp.id, date=self.d, **FULL_DAY)
        with self.assertRaises(ValueError):
            update_attendance(record_id=rec.id, total_hours_worked="12")
        with self.assertRaises(AttendanceRecord.DoesNotExist):
            update_attendance(record_id=rec.id + 999, remarks="x")

    def test_lunch_credit_on_full_schedule(self):
        self.emp.core_working_hours = "8:00 AM - 5:00 PM"
        self.emp.save()
        rec = create_attendance(employee_id=self.emp.id, date=self.d, time_in_am="08:00", time_out_am="12:00",
                                time_in_pm="12:00", time_out_pm="15:00")
        self.assertEqual(rec.total_hours_worked, Decimal("8.00"))
        self.assertEqual(rec.lunch_break_minutes, 60)

    # ---------- punches ----------
    def test_record_punch_flow(self):
        rec = record_punch(employee_code="E001", action=PunchAction.TIME_IN_AM, at=aware(datetime(2025, 1, 6, 8, 0)))
        self.assertEqual(rec.date, self.d)
        self.assertEqual(rec.time_in_am, time(8, 0))

        with self.assertRaises(DuplicatePunch):
            record_punch(employee_code="E001", action=PunchAction.TIME_IN_AM, at=aware(datetime(2025, 1, 6, 8, 5)))
        with self.assertRaises(UnparsableTime):
            record_punch(employee_code="E001", action=PunchAction.TIME_OUT_AM, at=aware(datetime(2025, 1, 6, 7, 0)))
        with self.assertRaises(UnparsableTime):
            record_punch(employee_code="E001", action=PunchAction.TIME_OUT_PM, at=aware(datetime(2025, 1, 6, 17, 0)))

        rec = record_punch(employee_code="E001", action=PunchAction.TIME_OUT_AM, at=aware(datetime(2025, 1, 6, 12, 0)))
        self.assertEqual(rec.total_hours_worked, Decimal("4.00"))
        self.assertEqual(AttendanceRecord.objects.filter(employee=self.emp).count(), 1)

    # ---------- batch ----------
    def test_preview_batch_marks_existing(self):
        create_attendance(employee_id=self.emp.id, date=date(2025, 1, 8), **FULL_DAY)
        items = preview_batch(employee_id=self.emp.id, start_date=date(2025, 1, 6), end_date=date(2025, 1, 12),
                              weekdays=[0, 2, 6])
        self.assertEqual([i.date for i in items], [date(2025, 1, 6), date(2025, 1, 8), date(2025, 1, 12)])
        self.assertEqual([i.skipped for i in items], [False, True, False])
        self.assertEqual(items[1].reason, "Already exists")

        items = preview_batch(employee_id=self.emp.id, start_date=date(2025, 1, 6), end_date=date(2025, 1, 12),
                              weekdays=[2], skip_existing=False)
        self.assertFalse(items[0].skipped)

    def test_batch_partial_success(self):
        create_attendance(employee_id=self.emp.id, date=date(2025, 1, 8), **FULL_DAY)
        dates = [date(2025, 1, n) for n in range(6, 13)]
        result = batch_create_attendance(
            employee_id=self.emp.id, dates=dates, template=FULL_DAY,
            excluded=[date(2025, 1, 7)], double_pay_on_sundays=True,
        )
        self.assertEqual((result.succeeded, result.skipped, result.failed), (5, 2, 0))
        self.assertFalse(result.cancelled)
        sunday = AttendanceRecord.objects.get(employee=self.emp, date=date(2025, 1, 12))
        self.assertTrue(sunday.is_double_pay)
        monday = AttendanceRecord.objects.get(employee=self.emp, date=date(2025, 1, 6))
        self.assertFalse(monday.is_double_pay)

    def test_batch_double_pay_ignored_for_fixed(self):
        result = batch_create_attendance(employee_id=self.fixed.id, dates=[date(2025, 1, 12)],
                                         template=FULL_DAY, double_pay_on_sundays=True)
        self.assertEqual(result.succeeded, 1)
        self.assertFalse(AttendanceRecord.objects.get(employee=self.fixed).is_double_pay)

    def test_batch_cancellation_keeps_written_items(self):
        calls = {"n": 0}

        def should_cancel():
            calls["n"] += 1
            return calls["n"] > 2

        dates = [date(2025, 1, n) for n in range(6, 11)]
        result = batch_create_attendance(employee_id=self.emp.id, dates=dates, template=FULL_DAY,
                                         should_cancel=should_cancel)
        self.assertTrue(result.cancelled)
        self.assertEqual(result.succeeded, 2)
        self.assertEqual(result.skipped, 3)
        self.assertEqual(AttendanceRecord.objects.filter(employee=self.emp).count(), 2)

    def test_batch_rejects_bad_template(self):
        with self.assertRaises(UnparsableTime):
            batch_create_attendance(employee_id=self.emp.id, dates=[self.d], template={"time_in_am": "xx"})
        self.assertFalse(AttendanceRecord.objects.exists())

    # ---------- reads ----------
    def test_today_statuses(self):
        today = timezone.localdate()
        AttendanceRecord.objects.create(employee=self.emp, date=today, time_in_am=time(8, 0))
        rows = {r["employee"].code: r for r in today_statuses()}
        self.assertEqual(rows["E001"]["status"], AttendanceStatus.WORKING)
        self.assertEqual(rows["E002"]["status"], AttendanceStatus.NO_RECORD)
        self.assertIsNone(rows["E002"]["record"])

    def test_monthly_summary(self):
        create_attendance(employee_id=self.emp.id, date=date(2025, 1, 6), **FULL_DAY)
        create_attendance(employee_id=self.emp.id, date=date(2025, 1, 7), leave_type=LeaveType.PERSONAL)
        create_attendance(employee_id=self.emp.id, date=date(2025, 1, 8))
        create_attendance(employee_id=self.emp.id, date=date(2025, 2, 3), **FULL_DAY)

        summary = monthly_summary(employee_code="E001", year=2025, month=1)
        self.assertEqual(summary["total_days"], 3)
        self.assertEqual(summary["present_days"], 2)
        self.assertEqual(summary["absent_days"], 1)
        self.assertEqual(summary["leave_days"], 1)
        self.assertEqual(summary["total_hours"], Decimal("8"))

    # ---------- delete ----------
    def test_delete_writes_audit_snapshot(self):
        rec = create_attendance(employee_id=self.emp.id, date=self.d, **FULL_DAY)
        delete_attendance(record_id=rec.id, actor=7)
        self.assertFalse(AttendanceRecord.objects.filter(id=rec.id).exists())
        log = AuditLog.objects.get(action="attendance.delete", object_id=str(rec.id))
        self.assertEqual(log.actor, 7)
        self.assertEqual(log.before["date"], "2025-01-06")

        with self.assertRaises(AttendanceRecord.DoesNotExist):
            delete_attendance(record_id=rec.id)

    def test_bulk_delete_reports_missing_ids(self):
        a = create_attendance(employee_id=self.emp.id, date=date(2025, 1, 6), **FULL_DAY)
        b = create_attendance(employee_id=self.emp.id, date=date(2025, 1, 7), **FULL_DAY)
        keep = create_attendance(employee_id=self.emp.id, date=date(2025, 1, 8), **FULL_DAY)

        result = bulk_delete_attendance(record_ids=[a.id, b.id, b.id, 999999])
        self.assertEqual(result, {"deleted": 2, "missing": [999999]})
        self.assertEqual(list(AttendanceRecord.objects.values_list("id", flat=True)), [keep.id])
        self.assertEqual(AuditLog.objects.filter(action="attendance.delete").count(), 2)

        with self.assertRaises(ValueError):
            bulk_delete_attendance(record_ids=[])

    # ---------- integrity ----------
    def test_check_violation_is_not_reported_as_duplicate(self):
        with self.assertRaises(IntegrityError) as ctx:
            attendance_repository.create({
                "employee_id": self.emp.id, "date": self.d, "total_hours_worked": Decimal("-1"),
            })
        self.assertNotIsInstance(ctx.exception, DuplicateRecord)

    def test_malformed_schedule_rejected_on_full_clean(self):
        emp = Employee(code="E010", full_name="Bad Schedule", core_working_hours="eight to five")
        with self.assertRaises(ValidationError) as ctx:
            emp.full_clean()
        self.assertIn("core_working_hours", ctx.exception.message_dict)

        emp.core_working_hours = "7:30 AM - 4:30 PM"
        emp.full_clean()

    # ---------- admin ----------
    def test_admin_edit_goes_through_service(self):
        rec = create_attendance(employee_id=self.fixed.id, date=self.d, **FULL_DAY)
        user = get_user_model().objects.create_superuser("admin", "admin@example.com", "pw")
        request = RequestFactory().post("/")
        request.user = user

        model_admin = AttendanceRecordAdmin(AttendanceRecord, admin.site)
        form_class = model_admin.get_form(request, obj=rec, change=True)
        form = form_class(instance=rec, data={
            "time_in_am": "08:00", "time_out_am": "12:00", "time_in_pm": "13:00", "time_out_pm": "19:00",
            "leave_type": "none", "is_double_pay": "on", "late_minutes": "0", "remarks": "",
        })
        self.assertTrue(form.is_valid(), form.errors)
        model_admin.save_model(request, form.save(commit=False), form, change=True)

        rec.refresh_from_db()
        self.assertEqual(rec.total_hours_worked, Decimal("10.00"))
        self.assertEqual(rec.overtime_hours, Decimal("0.00"))
        self.assertFalse(rec.is_double_pay)
        self.assertTrue(AuditLog.objects.filter(action="attendance.update", actor=user.id).exists())
