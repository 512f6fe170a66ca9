"""
Leave balance ledger.

One row per (employee, year, leave_type) holding three stored counters:
``total_allocated``, ``used`` and ``pending``. ``balance`` is always derived
from them as ``total_allocated - used - pending`` by :func:`recompute`, never
adjusted incrementally. A negative balance is a legitimate state (approved
extra leave), so none of the arithmetic here raises.

The ledger methods that mutate a balance do not commit; they run inside the
caller's transaction (leave apply / approve / reject / cancel) so the
application row and its balance are written together.
"""
import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException

from app.auth.permissions import Actor, RoleChecker
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.models.hr.leave_balance import LeaveBalance
from app.models.shared.enums import LeaveType
from app.schemas.hr.leave_balance_schema import LeaveBalanceResponse, LeaveBalanceSummary, LeaveBalanceTotals
from app.services.audit.audit_service import AuditService
from app.services.hr.employee_service import EmployeeService
from app.utils.date_time_serializer import model_snapshot
from app.utils.date_utils import local_today

logger = logging.getLogger(__name__)


def default_allocations() -> Mapping[LeaveType, float]:
    """Read-only allocation table built from settings"""
    return MappingProxyType({
        LeaveType(name): float(total)
        for name, total in settings.DEFAULT_LEAVE_ALLOCATIONS.items()
    })


def recompute(balance: LeaveBalance) -> LeaveBalance:
    balance.balance = (balance.total_allocated or 0) - (balance.used or 0) - (balance.pending or 0)
    return balance


def reserve(balance: LeaveBalance, days: float) -> LeaveBalance:
    """Hold days for a pending application"""
    balance.pending = (balance.pending or 0) + days
    return recompute(balance)


def commit(balance: LeaveBalance, days: float) -> LeaveBalance:
    """Move days from pending to used on approval"""
    balance.pending = (balance.pending or 0) - days
    balance.used = (balance.used or 0) + days
    return recompute(balance)


def release(balance: LeaveBalance, days: float) -> LeaveBalance:
    """Drop the hold of a rejected or cancelled application"""
    balance.pending = (balance.pending or 0) - days
    return recompute(balance)


class LeaveBalanceService:
    def __init__(self, session: AsyncSession, allocations: Optional[Mapping[LeaveType, float]] = None):
        self.session = session
        self.allocations = MappingProxyType(dict(allocations)) if allocations is not None else default_allocations()
        self.employee_service = EmployeeService(session)
        self.audit = AuditService(session)

    # Arithmetic is exposed on the service so callers go through one ledger object
    reserve = staticmethod(reserve)
    commit = staticmethod(commit)
    release = staticmethod(release)
    recompute = staticmethod(recompute)

    def allocation_for(self, leave_type: LeaveType) -> float:
        return float(self.allocations.get(leave_type, 0))

    async def find(self, employee_id: int, year: int, leave_type: LeaveType, lock: bool = True) -> Optional[LeaveBalance]:
        query = select(LeaveBalance).where(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.year == year,
            LeaveBalance.leave_type == leave_type
        )
        if lock:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_or_create(self, employee_id: int, year: int, leave_type: LeaveType, lock: bool = True) -> LeaveBalance:
        """Existing balance, or a fresh one seeded from the allocation table (added to the session, not committed)"""
        balance = await self.find(employee_id, year, leave_type, lock=lock)
        if balance:
            return balance

        allocated = self.allocation_for(leave_type)
        balance = LeaveBalance(
            employee_id=employee_id,
            year=year,
            leave_type=leave_type,
            total_allocated=allocated,
            used=0,
            pending=0,
            balance=allocated
        )
        try:
            async with self.session.begin_nested():
                self.session.add(balance)
        except IntegrityError:
            # A concurrent request created the row first; use theirs
            logger.info(f"{leave_type.value} balance for employee {employee_id} in {year} created concurrently")
            return await self.find(employee_id, year, leave_type, lock=True)
        logger.info(f"Initialized {leave_type.value} balance for employee {employee_id} in {year}: {allocated}")
        return balance

    async def create_overdrawn(self, employee_id: int, year: int, leave_type: LeaveType, days: float) -> LeaveBalance:
        """Balance for an approval that found no record: nothing allocated, everything used"""
        balance = LeaveBalance(
            employee_id=employee_id,
            year=year,
            leave_type=leave_type,
            total_allocated=0,
            used=days,
            pending=0
        )
        recompute(balance)
        self.session.add(balance)
        await self.session.flush()
        logger.warning(f"Created overdrawn {leave_type.value} balance for employee {employee_id} in {year}: -{days}")
        return balance

    # ---------- Allocation (HR / Executive / System Admin) ----------
    async def update_leave_allocation(
        self,
        actor: Actor,
        employee_id: int,
        year: int,
        leave_type: LeaveType,
        total_allocated: float,
        context: Optional[Dict] = None,
    ) -> LeaveBalanceResponse:
        RoleChecker(actor).require_privileged()
        if total_allocated < 0:
            raise ValidationError("Total allocated cannot be negative")

        try:
            await self.employee_service.get_active_employee(employee_id)

            balance = await self.find(employee_id, year, leave_type)
            before = model_snapshot(balance) if balance else None
            if balance is None:
                balance = LeaveBalance(
                    employee_id=employee_id,
                    year=year,
                    leave_type=leave_type,
                    used=0,
                    pending=0,
                    created_by=actor.employee_id
                )
                self.session.add(balance)

            balance.total_allocated = float(total_allocated)
            balance.updated_by = actor.employee_id
            recompute(balance)

            await self.session.commit()
            await self.session.refresh(balance)

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating leave allocation for employee {employee_id}: {e}")
            raise HTTPException(status_code=500, detail="Error updating leave allocation")

        response = LeaveBalanceResponse.model_validate(balance, from_attributes=True)
        logger.info(
            f"Leave allocation set: employee {employee_id}, {year}, {leave_type.value} = {total_allocated} "
            f"by employee {actor.employee_id}"
        )
        changes = {"after": model_snapshot(balance)}
        if before is not None:
            changes["before"] = before
        else:
            changes = {"created": changes["after"]}
        await self.audit.log(
            "UPDATE_LEAVE_ALLOCATION", "LeaveBalance", balance.id, actor,
            changes=changes, context=context
        )
        return response

    # ---------- Retrieval ----------
    async def get_balances(self, employee_id: int, year: int) -> List[LeaveBalance]:
        result = await self.session.scalars(
            select(LeaveBalance).where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.year == year
            ).order_by(LeaveBalance.leave_type)
        )
        return list(result.all())

    async def get_leave_balance(
        self,
        actor: Actor,
        employee_id: Optional[int] = None,
        year: Optional[int] = None,
    ) -> LeaveBalanceSummary:
        target_id = RoleChecker(actor).resolve_target(employee_id, "leave balance")
        year = year or local_today().year

        balances = await self.get_balances(target_id, year)
        totals = LeaveBalanceTotals(
            total_allocated=sum(b.total_allocated or 0 for b in balances),
            total_used=sum(b.used or 0 for b in balances),
            total_pending=sum(b.pending or 0 for b in balances),
            total_balance=sum(b.balance or 0 for b in balances),
        )
        return LeaveBalanceSummary(
            employee_id=target_id,
            year=year,
            leave_balances=[LeaveBalanceResponse.model_validate(b, from_attributes=True) for b in balances],
            totals=totals
        )
