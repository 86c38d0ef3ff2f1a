# -*- coding: utf-8 -*-
"""
Error kinds raised by the payroll engine.

Validation errors subclass ValueError (views answer 400/404/409), degradation
errors subclass RuntimeError (views answer 503). None of them is retried.
"""
from __future__ import annotations


class PayrollError(Exception):
    code = "payroll_error"

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.code)
        self.context = context


# ===== Validation =====
class UnknownEmployee(PayrollError, ValueError):
    code = "unknown_employee"


class DuplicateRecord(PayrollError, ValueError):
    code = "duplicate_record"


class DuplicatePunch(PayrollError, ValueError):
    code = "duplicate_punch"


class UnparsableTime(PayrollError, ValueError):
    code = "unparsable_time"


class InvalidDateRange(PayrollError, ValueError):
    code = "invalid_date_range"


# ===== External degradation =====
class ContributionServiceUnavailable(PayrollError, RuntimeError):
    code = "contribution_service_unavailable"


class AdvanceLedgerUnavailable(PayrollError, RuntimeError):
    code = "advance_ledger_unavailable"
