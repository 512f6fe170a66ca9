import pytest
from datetime import date, time

from app.auth.permissions import Actor, RoleChecker
from app.core.exceptions import PermissionDeniedError, ValidationError
from app.models.hr.attendance import Attendance
from app.models.hr.holiday import Holiday
from app.models.hr.leave import Leave
from app.models.hr.leave_balance import LeaveBalance
from app.models.shared.enums import AttendanceStatus, LeaveStatus, LeaveType, Role
from app.services.hr.attendance_service import compute_early_exit, compute_lateness, compute_work_hours
from app.services.hr.calendar_service import DayContext, resolve_day_status
from app.services.hr import leave_balance_service as ledger

MONDAY = date(2024, 3, 4)
SATURDAY = date(2024, 3, 2)


class TestAttendanceArithmetic:
    def test_late_check_in(self):
        assert compute_lateness(time(9, 15), time(9, 0)) == (True, 15)

    def test_early_check_in_is_not_late(self):
        assert compute_lateness(time(8, 50), time(9, 0)) == (False, 0)

    def test_on_time_check_in(self):
        assert compute_lateness(time(9, 0), time(9, 0)) == (False, 0)

    def test_early_exit(self):
        assert compute_early_exit(time(17, 30), time(18, 0)) == (True, 30)

    def test_overtime_is_not_early_exit(self):
        assert compute_early_exit(time(19, 0), time(18, 0)) == (False, 0)

    def test_work_hours(self):
        assert compute_work_hours(time(9, 0), time(18, 0)) == 9.0

    def test_check_out_before_check_in_rejected(self):
        with pytest.raises(ValidationError):
            compute_work_hours(time(18, 0), time(9, 0))


class TestLedgerArithmetic:
    def _balance(self, allocated=10.0, used=0.0, pending=0.0):
        return ledger.recompute(LeaveBalance(
            employee_id=1, year=2024, leave_type=LeaveType.CASUAL,
            total_allocated=allocated, used=used, pending=pending
        ))

    def test_recompute(self):
        balance = self._balance(allocated=12, used=2, pending=3)
        assert balance.balance == 7

    def test_reserve_then_commit(self):
        balance = ledger.reserve(self._balance(), 3)
        assert (balance.pending, balance.used, balance.balance) == (3, 0, 7)
        ledger.commit(balance, 3)
        assert (balance.pending, balance.used, balance.balance) == (0, 3, 7)

    def test_reserve_then_release(self):
        balance = ledger.release(ledger.reserve(self._balance(), 4), 4)
        assert (balance.pending, balance.used, balance.balance) == (0, 0, 10)

    def test_negative_balance_is_allowed(self):
        balance = ledger.reserve(self._balance(allocated=2), 5)
        assert balance.balance == -3

    def test_default_allocations_are_read_only(self):
        allocations = ledger.default_allocations()
        assert allocations[LeaveType.SICK] == 12
        assert allocations[LeaveType.UNPAID] == 999
        with pytest.raises(TypeError):
            allocations[LeaveType.SICK] = 1


class TestDayStatus:
    def test_holiday_beats_approved_leave(self):
        ctx = DayContext(
            day=MONDAY,
            holiday=Holiday(name="Independence Day"),
            leave=Leave(status=LeaveStatus.APPROVED),
        )
        assert resolve_day_status(ctx) == "Holiday"

    def test_approved_leave(self):
        assert resolve_day_status(DayContext(day=MONDAY, leave=Leave(status=LeaveStatus.APPROVED))) == "Leave"

    def test_pending_leave(self):
        assert resolve_day_status(DayContext(day=MONDAY, leave=Leave(status=LeaveStatus.PENDING))) == "Leave (Pending)"

    def test_leave_beats_attendance(self):
        ctx = DayContext(
            day=MONDAY,
            leave=Leave(status=LeaveStatus.APPROVED),
            attendance=Attendance(status=AttendanceStatus.PRESENT),
        )
        assert resolve_day_status(ctx) == "Leave"

    def test_attendance_on_weekend_wins(self):
        ctx = DayContext(day=SATURDAY, attendance=Attendance(status=AttendanceStatus.HALF_DAY))
        assert resolve_day_status(ctx) == "Half Day"

    def test_weekend_and_absent_defaults(self):
        assert resolve_day_status(DayContext(day=SATURDAY)) == "Weekend"
        assert resolve_day_status(DayContext(day=MONDAY)) == "Absent"


class TestRoleChecker:
    def test_system_admin_passes_every_check(self):
        RoleChecker(Actor(1, Role.SYSTEM_ADMIN)).require([Role.HR])

    def test_employee_fails_privileged_check(self):
        with pytest.raises(PermissionDeniedError):
            RoleChecker(Actor(1, Role.EMPLOYEE)).require_privileged()

    def test_employee_targets_only_self(self):
        checker = RoleChecker(Actor(1, Role.EMPLOYEE))
        assert checker.resolve_target(None, "leave") == 1
        assert checker.resolve_target(1, "leave") == 1
        with pytest.raises(PermissionDeniedError):
            checker.resolve_target(2, "leave")

    def test_hr_can_target_anyone(self):
        assert RoleChecker(Actor(1, Role.HR)).resolve_target(2, "leave") == 2

    def test_intern_cannot_view_others(self):
        with pytest.raises(PermissionDeniedError):
            RoleChecker(Actor(5, Role.INTERN)).ensure_can_view(6, "attendance")
