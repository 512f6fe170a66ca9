import pytest
from datetime import timedelta
from sqlalchemy import select

from app.core.config import settings
from app.core.exceptions import (
    InvalidRangeError, NotFoundError, NotOwnerError, NotPendingError, OverlappingLeaveError,
    PermissionDeniedError, ValidationError
)
from app.models.auth.audit_log import AuditLog
from app.models.hr.leave import Leave
from app.models.hr.leave_balance import LeaveBalance
from app.models.shared.enums import LeaveStatus, LeaveType
from app.schemas.hr.leave_schema import LeaveApply
from app.services.audit import audit_service
from app.services.hr.leave_balance_service import LeaveBalanceService
from app.services.hr.leave_service import LeaveService
from tests.helpers import upcoming_monday

ALLOCATIONS = {
    LeaveType.SICK: 12,
    LeaveType.CASUAL: 2,
    LeaveType.UNPAID: 0,
}


def week_of(leave_type: LeaveType, start=None, days: int = 5) -> LeaveApply:
    start = start or upcoming_monday()
    return LeaveApply(leave_type=leave_type, start_date=start, end_date=start + timedelta(days=days - 1))


@pytest.fixture
def ledger(session):
    return LeaveBalanceService(session, allocations=ALLOCATIONS)


@pytest.fixture
def service(session, ledger):
    return LeaveService(session, ledger=ledger)


async def balance_of(ledger, actor, leave_type, year):
    summary = await ledger.get_leave_balance(actor, year=year)
    return next(b for b in summary.leave_balances if b.leave_type == leave_type)


def assert_ledger_invariant(balance):
    assert balance.balance == balance.total_allocated - balance.used - balance.pending


class TestApplyLeave:
    async def test_apply_reserves_pending_days(self, service, ledger, staff):
        employee = staff["employee"]
        data = week_of(LeaveType.SICK)

        leave = await service.apply_leave(employee, data)

        assert leave.status == LeaveStatus.PENDING
        assert leave.total_days == 5
        assert leave.is_extra_leave is False
        assert leave.applied_by == employee.employee_id

        balance = await balance_of(ledger, employee, LeaveType.SICK, data.start_date.year)
        assert (balance.total_allocated, balance.used, balance.pending, balance.balance) == (12, 0, 5, 7)
        assert_ledger_invariant(balance)

    async def test_weekend_days_are_not_counted(self, service, staff):
        # Monday through the following Monday
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.SICK, days=8))
        assert leave.total_days == 6

    async def test_exceeding_balance_flags_extra_leave(self, service, ledger, staff):
        employee = staff["employee"]
        data = week_of(LeaveType.CASUAL)

        leave = await service.apply_leave(employee, data)

        assert leave.is_extra_leave is True
        balance = await balance_of(ledger, employee, LeaveType.CASUAL, data.start_date.year)
        assert balance.balance == -3
        assert_ledger_invariant(balance)

    async def test_unpaid_leave_is_never_extra(self, service, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.UNPAID))
        assert leave.is_extra_leave is False

    async def test_past_start_date_rejected(self, service, staff):
        start = upcoming_monday() - timedelta(days=60)
        with pytest.raises(InvalidRangeError):
            await service.apply_leave(staff["employee"], week_of(LeaveType.SICK, start=start))

    async def test_end_before_start_rejected(self, service, staff):
        start = upcoming_monday()
        data = LeaveApply(leave_type=LeaveType.SICK, start_date=start, end_date=start - timedelta(days=1))
        with pytest.raises(InvalidRangeError):
            await service.apply_leave(staff["employee"], data)

    async def test_weekend_only_range_rejected(self, service, staff):
        saturday = upcoming_monday() + timedelta(days=5)
        data = LeaveApply(leave_type=LeaveType.SICK, start_date=saturday, end_date=saturday + timedelta(days=1))
        with pytest.raises(InvalidRangeError):
            await service.apply_leave(staff["employee"], data)

    async def test_overlap_rejected_and_ledger_untouched(self, service, ledger, staff):
        employee = staff["employee"]
        first = week_of(LeaveType.SICK)
        await service.apply_leave(employee, first)

        overlapping = LeaveApply(
            leave_type=LeaveType.CASUAL,
            start_date=first.end_date,
            end_date=first.end_date + timedelta(days=3)
        )
        with pytest.raises(OverlappingLeaveError):
            await service.apply_leave(employee, overlapping)

        balance = await balance_of(ledger, employee, LeaveType.SICK, first.start_date.year)
        assert balance.pending == 5
        summary = await ledger.get_leave_balance(employee, year=first.start_date.year)
        assert LeaveType.CASUAL not in [b.leave_type for b in summary.leave_balances]

    async def test_other_employee_may_overlap(self, service, staff):
        data = week_of(LeaveType.SICK)
        await service.apply_leave(staff["employee"], data)
        leave = await service.apply_leave(staff["colleague"], data)
        assert leave.employee_id == staff["colleague"].employee_id

    async def test_apply_is_audited(self, service, session, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.SICK), context={"ip_address": "10.0.0.7"})

        result = await session.execute(select(AuditLog).where(AuditLog.action == "APPLY_LEAVE"))
        entry = result.scalar_one()
        assert entry.entity_type == "Leave"
        assert entry.entity_id == leave.id
        assert entry.user_id == staff["employee"].employee_id
        assert entry.ip_address == "10.0.0.7"
        assert entry.changes["created"]["status"] == "Pending"

    async def test_employee_row_locked_before_overlap_check(self, service, staff, monkeypatch):
        calls = []
        get_employee = service.employee_service.get_active_employee
        find_overlap = service._find_overlap

        async def recording_get_employee(employee_id, lock=False):
            calls.append(("employee", lock))
            return await get_employee(employee_id, lock=lock)

        async def recording_find_overlap(employee_id, start_date, end_date):
            calls.append(("overlap", None))
            return await find_overlap(employee_id, start_date, end_date)

        monkeypatch.setattr(service.employee_service, "get_active_employee", recording_get_employee)
        monkeypatch.setattr(service, "_find_overlap", recording_find_overlap)

        await service.apply_leave(staff["employee"], week_of(LeaveType.SICK))

        assert calls == [("employee", True), ("overlap", None)]

    async def test_balance_created_concurrently_is_reused(
        self, service, ledger, session, session_maker, staff, monkeypatch
    ):
        employee = staff["employee"]
        data = week_of(LeaveType.SICK)
        find = ledger.find
        raced = []

        async def find_then_lose_race(employee_id, year, leave_type, lock=True):
            found = await find(employee_id, year, leave_type, lock=lock)
            if not raced:
                raced.append(leave_type)
                async with session_maker() as other:
                    other.add(LeaveBalance(
                        employee_id=employee_id, year=year, leave_type=leave_type,
                        total_allocated=12, used=0, pending=0, balance=12
                    ))
                    await other.commit()
            return found

        monkeypatch.setattr(ledger, "find", find_then_lose_race)

        leave = await service.apply_leave(employee, data)

        assert leave.status == LeaveStatus.PENDING
        result = await session.execute(
            select(LeaveBalance).where(
                LeaveBalance.employee_id == employee.employee_id,
                LeaveBalance.leave_type == LeaveType.SICK
            )
        )
        rows = result.scalars().all()
        assert len(rows) == 1
        assert (rows[0].total_allocated, rows[0].pending, rows[0].balance) == (12, 5, 7)

    async def test_failed_audit_write_keeps_the_application(
        self, service, ledger, session_maker, staff, monkeypatch
    ):
        def unavailable_audit_store(**kwargs):
            raise RuntimeError("audit store unavailable")

        monkeypatch.setattr(audit_service, "AuditLog", unavailable_audit_store)
        employee = staff["employee"]
        data = week_of(LeaveType.SICK)

        leave = await service.apply_leave(employee, data)

        assert leave.status == LeaveStatus.PENDING
        async with session_maker() as fresh:
            stored = await fresh.get(Leave, leave.id)
            assert stored is not None
            assert stored.status == LeaveStatus.PENDING
            audits = await fresh.execute(select(AuditLog))
            assert audits.scalars().all() == []
        balance = await balance_of(ledger, employee, LeaveType.SICK, data.start_date.year)
        assert (balance.pending, balance.balance) == (5, 7)


class TestTransitions:
    async def test_approve_moves_pending_to_used(self, service, ledger, staff):
        employee = staff["employee"]
        data = week_of(LeaveType.SICK)
        leave = await service.apply_leave(employee, data)

        approved = await service.approve_leave(staff["hr"], leave.id)

        assert approved.status == LeaveStatus.APPROVED
        assert approved.approved_by == staff["hr"].employee_id
        assert approved.approved_by_role == staff["hr"].role
        assert approved.approved_at is not None
        balance = await balance_of(ledger, employee, LeaveType.SICK, data.start_date.year)
        assert (balance.used, balance.pending, balance.balance) == (5, 0, 7)
        assert_ledger_invariant(balance)

    async def test_reject_releases_pending(self, service, ledger, staff):
        employee = staff["employee"]
        data = week_of(LeaveType.SICK)
        leave = await service.apply_leave(employee, data)

        rejected = await service.reject_leave(staff["executive"], leave.id, "  Peak season  ")

        assert rejected.status == LeaveStatus.REJECTED
        assert rejected.rejection_reason == "Peak season"
        balance = await balance_of(ledger, employee, LeaveType.SICK, data.start_date.year)
        assert (balance.used, balance.pending, balance.balance) == (0, 0, 12)

    async def test_reject_requires_reason(self, service, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.SICK))
        with pytest.raises(ValidationError):
            await service.reject_leave(staff["hr"], leave.id, "   ")

    async def test_cancel_restores_balance(self, service, ledger, staff):
        employee = staff["employee"]
        data = week_of(LeaveType.SICK)
        leave = await service.apply_leave(employee, data)

        cancelled = await service.cancel_leave(employee, leave.id)

        assert cancelled.status == LeaveStatus.CANCELLED
        balance = await balance_of(ledger, employee, LeaveType.SICK, data.start_date.year)
        assert (balance.used, balance.pending, balance.balance) == (0, 0, 12)

    async def test_cancelled_dates_can_be_reapplied(self, service, staff):
        employee = staff["employee"]
        data = week_of(LeaveType.SICK)
        leave = await service.apply_leave(employee, data)
        await service.cancel_leave(employee, leave.id)

        again = await service.apply_leave(employee, data)
        assert again.status == LeaveStatus.PENDING

    async def test_only_owner_can_cancel(self, service, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.SICK))
        with pytest.raises(NotOwnerError):
            await service.cancel_leave(staff["colleague"], leave.id)
        with pytest.raises(NotOwnerError):
            await service.cancel_leave(staff["hr"], leave.id)

    async def test_terminal_states_reject_transitions(self, service, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.SICK))
        await service.approve_leave(staff["hr"], leave.id)

        with pytest.raises(NotPendingError) as exc_info:
            await service.approve_leave(staff["hr"], leave.id)
        assert exc_info.value.status_code == 409
        assert "Approved" in exc_info.value.detail

        with pytest.raises(NotPendingError):
            await service.reject_leave(staff["hr"], leave.id, "Too late")
        with pytest.raises(NotPendingError):
            await service.cancel_leave(staff["employee"], leave.id)

    async def test_employee_cannot_approve(self, service, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.SICK))
        with pytest.raises(PermissionDeniedError):
            await service.approve_leave(staff["colleague"], leave.id)

    async def test_approve_unknown_leave(self, service, staff):
        with pytest.raises(NotFoundError):
            await service.approve_leave(staff["hr"], 9999)

    async def test_approve_without_balance_creates_overdrawn_record(self, service, ledger, session, staff):
        employee = staff["employee"]
        start = upcoming_monday()
        leave = Leave(
            employee_id=employee.employee_id,
            leave_type=LeaveType.OTHER,
            start_date=start,
            end_date=start + timedelta(days=2),
            total_days=3,
            status=LeaveStatus.PENDING,
            applied_by=employee.employee_id
        )
        session.add(leave)
        await session.commit()

        await service.approve_leave(staff["admin"], leave.id)

        balance = await balance_of(ledger, employee, LeaveType.OTHER, start.year)
        assert (balance.total_allocated, balance.used, balance.pending, balance.balance) == (0, 3, 0, -3)

    async def test_extra_leave_approval_by_hr_by_default(self, service, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.CASUAL))
        assert leave.is_extra_leave
        approved = await service.approve_leave(staff["hr"], leave.id)
        assert approved.status == LeaveStatus.APPROVED

    async def test_extra_leave_can_require_elevated_approver(self, service, staff, monkeypatch):
        monkeypatch.setattr(settings, "EXTRA_LEAVE_REQUIRES_ELEVATED_APPROVAL", True)
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.CASUAL))

        with pytest.raises(PermissionDeniedError):
            await service.approve_leave(staff["hr"], leave.id)

        approved = await service.approve_leave(staff["executive"], leave.id)
        assert approved.status == LeaveStatus.APPROVED

    async def test_transitions_are_audited_with_before_and_after(self, service, session, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.SICK))
        await service.approve_leave(staff["hr"], leave.id)

        result = await session.execute(select(AuditLog).where(AuditLog.action == "APPROVE_LEAVE"))
        entry = result.scalar_one()
        assert entry.changes["before"]["status"] == "Pending"
        assert entry.changes["after"]["status"] == "Approved"
        assert entry.user_role == "HR"


class TestLeaveRetrieval:
    async def test_employee_lists_own_leaves(self, service, staff):
        await service.apply_leave(staff["employee"], week_of(LeaveType.SICK))
        await service.apply_leave(staff["colleague"], week_of(LeaveType.SICK))

        page = await service.get_leaves(staff["employee"])
        assert page["count"] == 1
        assert page["data"][0].employee_id == staff["employee"].employee_id

    async def test_employee_cannot_list_others(self, service, staff):
        with pytest.raises(PermissionDeniedError):
            await service.get_leaves(staff["employee"], employee_id=staff["colleague"].employee_id)

    async def test_hr_filters_by_status_and_range(self, service, staff):
        employee = staff["employee"]
        first = week_of(LeaveType.SICK)
        second = week_of(LeaveType.SICK, start=first.start_date + timedelta(days=14))
        leave = await service.apply_leave(employee, first)
        await service.apply_leave(employee, second)
        await service.approve_leave(staff["hr"], leave.id)

        approved = await service.get_leaves(staff["hr"], employee_id=employee.employee_id, status=LeaveStatus.APPROVED)
        assert [l.id for l in approved["data"]] == [leave.id]

        in_range = await service.get_leaves(
            staff["hr"], employee_id=employee.employee_id,
            start_date=second.start_date, end_date=second.end_date
        )
        assert in_range["count"] == 1
        assert in_range["data"][0].start_date == second.start_date

    async def test_get_leave_ownership(self, service, staff):
        leave = await service.apply_leave(staff["employee"], week_of(LeaveType.SICK))

        assert (await service.get_leave(staff["employee"], leave.id)).id == leave.id
        assert (await service.get_leave(staff["hr"], leave.id)).id == leave.id
        with pytest.raises(PermissionDeniedError):
            await service.get_leave(staff["colleague"], leave.id)
        with pytest.raises(NotFoundError):
            await service.get_leave(staff["hr"], 9999)
