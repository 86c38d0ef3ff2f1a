from datetime import date, time
from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from hr_payroll.models import AttendanceRecord, CashAdvance, Employee, PayrollLineItem
from hr_payroll.repositories import advance_repository

from .helpers import working_days

STUB = "hr_payroll.tests.helpers.stub_calculator"


@override_settings(TIME_ZONE="Asia/Manila")
class AttendanceApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.emp = Employee.objects.create(
            code="E001", full_name="Juan Dela Cruz", department="Ops",
            standard_workweek_hours=Decimal("56"), base_salary=Decimal("30000.00"),
            allowance=Decimal("500.00"), core_working_hours="8:00 AM - 5:00 PM",
        )

    def _create(self, **extra):
        body = {
            "employee_code": "E001", "date": "2025-01-06",
            "time_in_am": "8:00 AM", "time_out_am": "12:00 PM",
            "time_in_pm": "13:00", "time_out_pm": "17:00",
        }
        body.update(extra)
        return self.client.post("/payroll/attendance/", body, format="json")

    def test_create_then_duplicate(self):
        res = self._create()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["total_hours_worked"], "8.00")
        self.assertEqual(res.data["status"], "present")

        res = self._create()
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "duplicate_record")

    def test_create_errors(self):
        res = self._create(employee_code="NOPE")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["code"], "unknown_employee")

        res = self._create(time_in_am="quarter past eight")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "unparsable_time")

    def test_patch_recomputes_hours(self):
        record_id = self._create().data["id"]
        res = self.client.patch(f"/payroll/attendance/{record_id}/",
                                {"time_out_pm": "19:00"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_hours_worked"], "10.00")
        self.assertEqual(res.data["overtime_hours"], "2.00")

        res = self.client.patch("/payroll/attendance/999999/", {"remarks": "x"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_is_paginated_and_filtered(self):
        self._create()
        self._create(date="2025-01-07")
        res = self.client.get("/payroll/attendance/", {"employee_code": "E001", "from": "2025-01-07"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["date"], "2025-01-07")

    def test_punch_twice_conflicts(self):
        body = {"employee_code": "E001", "action": "time_in_am"}
        res = self.client.post("/payroll/attendance/punch/", body, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(res.data["time_in_am"])

        res = self.client.post("/payroll/attendance/punch/", body, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "duplicate_punch")

    def test_batch_preview_and_insert(self):
        self._create(date="2025-01-07")
        res = self.client.post("/payroll/attendance/batch/preview/", {
            "employee_id": self.emp.id, "start_date": "2025-01-06", "end_date": "2025-01-12",
            "weekdays": [0, 1, 2],
        }, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([i["date"] for i in res.data], ["2025-01-06", "2025-01-07", "2025-01-08"])
        self.assertEqual([i["skipped"] for i in res.data], [False, True, False])

        res = self.client.post("/payroll/attendance/batch/", {
            "employee_id": self.emp.id,
            "dates": ["2025-01-06", "2025-01-07", "2025-01-08"],
            "excluded": ["2025-01-08"],
            "time_in_am": "08:00", "time_out_am": "12:00",
            "time_in_pm": "13:00", "time_out_pm": "17:00",
        }, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual((res.data["succeeded"], res.data["skipped"], res.data["failed"]), (1, 2, 0))
        self.assertEqual(AttendanceRecord.objects.filter(employee=self.emp).count(), 2)

    def test_today_lists_missing_records(self):
        self._create(date="2025-01-06")
        Employee.objects.create(code="E009", full_name="Absent Person")
        res = self.client.get("/payroll/attendance/today/", {"date": "2025-01-06"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        by_code = {row["employee_code"]: row for row in res.data}
        self.assertEqual(by_code["E001"]["status"], "present")
        self.assertEqual(by_code["E009"]["status"], "no_record")
        self.assertIsNone(by_code["E009"]["record_id"])

    def test_monthly_summary(self):
        self._create(date="2025-01-06")
        self._create(date="2025-01-07", time_in_pm="", time_out_pm="")
        res = self.client.get("/payroll/attendance/monthly-summary/",
                              {"employee_code": "E001", "year": 2025, "month": 1})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_days"], 2)
        self.assertEqual(res.data["full_days"], 1)

        res = self.client.get("/payroll/attendance/monthly-summary/",
                              {"employee_code": "E001", "year": 2025, "month": 13})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_and_bulk_delete(self):
        first = self._create().data["id"]
        second = self._create(date="2025-01-07").data["id"]
        third = self._create(date="2025-01-08").data["id"]

        res = self.client.delete(f"/payroll/attendance/{first}/")
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        res = self.client.delete(f"/payroll/attendance/{first}/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        res = self.client.post("/payroll/attendance/bulk-delete/", {"ids": [second, third, first]}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["deleted"], 2)
        self.assertEqual(res.data["missing"], [first])
        self.assertFalse(AttendanceRecord.objects.exists())

        res = self.client.post("/payroll/attendance/bulk-delete/", {"ids": []}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(TIME_ZONE="Asia/Manila", PAYROLL_CONTRIBUTION_CALCULATOR=STUB)
class PayrollApiTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.emp = Employee.objects.create(
            code="E001", full_name="Juan Dela Cruz", standard_workweek_hours=Decimal("56"),
            base_salary=Decimal("30000.00"), allowance=Decimal("500.00"),
            core_working_hours="8:00 AM - 5:00 PM", date_of_birth=date(1990, 5, 1),
        )
        for day in working_days(date(2025, 1, 1), date(2025, 1, 31)):
            AttendanceRecord.objects.create(
                employee=cls.emp, date=day,
                time_in_am=time(8, 0), time_out_am=time(12, 0),
                time_in_pm=time(13, 0), time_out_pm=time(17, 0),
                total_hours_worked=Decimal("8.00"),
            )
        CashAdvance.objects.create(employee=cls.emp, date=date(2025, 1, 20), amount=Decimal("2000.00"))

    body = {"employee_code": "E001", "start_date": "2025-01-16", "end_date": "2025-01-31"}

    def test_compute(self):
        res = self.client.post("/payroll/periods/compute/", self.body, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["cutoff"], "2nd")
        self.assertEqual(res.data["net_pay"], "13600.00")
        self.assertEqual(res.data["deductions"]["advance_status"], "deducted")
        self.assertEqual(len(res.data["days"]), 14)
        self.assertFalse(PayrollLineItem.objects.exists())

        res = self.client.post("/payroll/periods/compute/", {**self.body, "skip_advance": True}, format="json")
        self.assertEqual(res.data["net_pay"], "15600.00")
        self.assertEqual(res.data["deductions"]["advance_status"], "skipped")

    def test_compute_validation(self):
        res = self.client.post("/payroll/periods/compute/",
                               {**self.body, "end_date": "2025-01-01"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.post("/payroll/periods/compute/", {**self.body, "employee_code": "X"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_finalize_and_list(self):
        res = self.client.post("/payroll/periods/finalize/", {**self.body, "remarks": "Jan B"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["net_pay"], "13600.00")
        self.assertEqual(res.data["employee_code"], "E001")

        res = self.client.get("/payroll/line-items/", {"employee_code": "E001"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["remarks"], "Jan B")

    def test_finalize_refused_while_ledger_down(self):
        with patch.object(advance_repository, "_window", side_effect=DatabaseError("gone")):
            res = self.client.post("/payroll/periods/compute/", self.body, format="json")
            self.assertEqual(res.status_code, status.HTTP_200_OK)
            self.assertFalse(res.data["can_finalize"])
            self.assertIsNone(res.data["deductions"]["outstanding_advance"])

            res = self.client.post("/payroll/periods/finalize/", self.body, format="json")
        self.assertEqual(res.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(res.data["code"], "advance_ledger_unavailable")
        self.assertFalse(PayrollLineItem.objects.exists())

    def test_line_item_update_and_delete(self):
        item_id = self.client.post("/payroll/periods/finalize/", self.body, format="json").data["id"]

        res = self.client.patch(f"/payroll/line-items/{item_id}/", {"status": "paid"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "paid")
        self.assertEqual(res.data["net_pay"], "13600.00")

        res = self.client.patch(f"/payroll/line-items/{item_id}/", {"status": "void"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        res = self.client.patch(f"/payroll/line-items/{item_id}/", {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.delete(f"/payroll/line-items/{item_id}/")
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        res = self.client.patch(f"/payroll/line-items/{item_id}/", {"status": "paid"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["code"], "not_found")
