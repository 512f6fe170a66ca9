import logging
from typing import Any, Dict, Optional
from datetime import date, datetime, timezone
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, func, or_, select

from app.auth.permissions import ELEVATED_ROLES, Actor, RoleChecker
from app.core.config import settings
from app.core.exceptions import (
    InvalidRangeError, NotFoundError, NotOwnerError, NotPendingError, OverlappingLeaveError, ValidationError
)
from app.models.hr.leave import Leave
from app.models.shared.enums import LeaveStatus, LeaveType
from app.schemas.hr.leave_schema import LeaveApply, LeaveResponse
from app.services.audit.audit_service import AuditService
from app.services.hr.employee_service import EmployeeService
from app.services.hr.leave_balance_service import LeaveBalanceService
from app.utils.date_time_serializer import model_snapshot
from app.utils.date_utils import business_days_between, local_today

logger = logging.getLogger(__name__)

# Applications that hold days on the ledger and block overlapping requests
ACTIVE_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


class LeaveService:
    def __init__(self, session: AsyncSession, ledger: Optional[LeaveBalanceService] = None):
        self.session = session
        self.ledger = ledger or LeaveBalanceService(session)
        self.employee_service = EmployeeService(session)
        self.audit = AuditService(session)

    # region Leave Helper Methods
    async def _get_for_update(self, leave_id: int) -> Leave:
        result = await self.session.execute(
            select(Leave).where(
                Leave.id == leave_id,
                Leave.is_deleted == False
            ).with_for_update()
        )
        leave = result.scalar_one_or_none()
        if not leave:
            raise NotFoundError("Leave application not found")
        return leave

    @staticmethod
    def _ensure_pending(leave: Leave):
        if leave.status != LeaveStatus.PENDING:
            raise NotPendingError(leave.status.value)

    async def _find_overlap(self, employee_id: int, start_date: date, end_date: date) -> Optional[Leave]:
        result = await self.session.execute(
            select(Leave).where(
                Leave.employee_id == employee_id,
                Leave.status.in_(ACTIVE_STATUSES),
                Leave.is_deleted == False,
                Leave.start_date <= end_date,
                Leave.end_date >= start_date
            )
        )
        return result.scalars().first()
    # endregion

    # ---------- Apply ----------
    async def apply_leave(
        self,
        actor: Actor,
        data: LeaveApply,
        context: Optional[Dict] = None,
    ) -> LeaveResponse:
        today = local_today()
        if data.start_date < today:
            raise InvalidRangeError("Cannot apply for leave on past dates")
        if data.end_date < data.start_date:
            raise InvalidRangeError("End date must be on or after start date")

        total_days = business_days_between(data.start_date, data.end_date)
        if total_days <= 0:
            raise InvalidRangeError("Leave period contains no working days")

        try:
            # Employee row lock serializes this employee's applications across leave types
            await self.employee_service.get_active_employee(actor.employee_id, lock=True)

            if await self._find_overlap(actor.employee_id, data.start_date, data.end_date):
                raise OverlappingLeaveError()

            balance = await self.ledger.get_or_create(actor.employee_id, data.start_date.year, data.leave_type)
            available = balance.balance - balance.pending
            is_extra_leave = available < total_days and data.leave_type != LeaveType.UNPAID
            if is_extra_leave:
                logger.warning(
                    f"Extra leave requested: employee {actor.employee_id}, {data.leave_type.value}, "
                    f"{total_days} days requested, {available} available"
                )

            leave = Leave(
                employee_id=actor.employee_id,
                leave_type=data.leave_type,
                start_date=data.start_date,
                end_date=data.end_date,
                total_days=total_days,
                is_extra_leave=is_extra_leave,
                status=LeaveStatus.PENDING,
                reason=data.reason,
                applied_by=actor.employee_id,
                created_by=actor.employee_id
            )
            self.session.add(leave)
            self.ledger.reserve(balance, total_days)

            await self.session.commit()
            await self.session.refresh(leave)

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error applying leave for employee {actor.employee_id}: {e}")
            raise HTTPException(status_code=500, detail="Error applying for leave")

        response = LeaveResponse.model_validate(leave, from_attributes=True)
        logger.info(
            f"Leave applied: employee {actor.employee_id}, {data.leave_type.value}, "
            f"{data.start_date} to {data.end_date} ({total_days} days)"
        )
        await self.audit.log(
            "APPLY_LEAVE", "Leave", leave.id, actor,
            changes={"created": model_snapshot(leave)}, context=context
        )
        return response

    # ---------- Approve (HR / Executive / System Admin) ----------
    async def approve_leave(self, actor: Actor, leave_id: int, context: Optional[Dict] = None) -> LeaveResponse:
        checker = RoleChecker(actor)
        checker.require_privileged()

        try:
            leave = await self._get_for_update(leave_id)
            self._ensure_pending(leave)
            if leave.is_extra_leave and settings.EXTRA_LEAVE_REQUIRES_ELEVATED_APPROVAL:
                checker.require(ELEVATED_ROLES, "Extra leave must be approved by an Executive")

            before = model_snapshot(leave)
            leave.status = LeaveStatus.APPROVED
            leave.approved_by = actor.employee_id
            leave.approved_by_role = actor.role
            leave.approved_at = datetime.now(timezone.utc)
            leave.updated_by = actor.employee_id

            balance = await self.ledger.find(leave.employee_id, leave.start_date.year, leave.leave_type)
            if balance:
                self.ledger.commit(balance, leave.total_days)
            else:
                await self.ledger.create_overdrawn(
                    leave.employee_id, leave.start_date.year, leave.leave_type, leave.total_days
                )

            await self.session.commit()
            await self.session.refresh(leave)

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error approving leave {leave_id}: {e}")
            raise HTTPException(status_code=500, detail="Error approving leave")

        response = LeaveResponse.model_validate(leave, from_attributes=True)
        logger.info(f"Leave {leave_id} approved by employee {actor.employee_id} ({actor.role.value})")
        await self.audit.log(
            "APPROVE_LEAVE", "Leave", leave.id, actor,
            changes={"before": before, "after": model_snapshot(leave)}, context=context
        )
        return response

    # ---------- Reject (HR / Executive / System Admin) ----------
    async def reject_leave(
        self,
        actor: Actor,
        leave_id: int,
        rejection_reason: str,
        context: Optional[Dict] = None,
    ) -> LeaveResponse:
        RoleChecker(actor).require_privileged()
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationError("Rejection reason is required")

        try:
            leave = await self._get_for_update(leave_id)
            self._ensure_pending(leave)

            before = model_snapshot(leave)
            leave.status = LeaveStatus.REJECTED
            leave.rejection_reason = rejection_reason.strip()
            leave.approved_by = actor.employee_id
            leave.approved_by_role = actor.role
            leave.approved_at = datetime.now(timezone.utc)
            leave.updated_by = actor.employee_id

            balance = await self.ledger.find(leave.employee_id, leave.start_date.year, leave.leave_type)
            if balance:
                self.ledger.release(balance, leave.total_days)

            await self.session.commit()
            await self.session.refresh(leave)

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error rejecting leave {leave_id}: {e}")
            raise HTTPException(status_code=500, detail="Error rejecting leave")

        response = LeaveResponse.model_validate(leave, from_attributes=True)
        logger.info(f"Leave {leave_id} rejected by employee {actor.employee_id}")
        await self.audit.log(
            "REJECT_LEAVE", "Leave", leave.id, actor,
            changes={"before": before, "after": model_snapshot(leave)}, context=context
        )
        return response

    # ---------- Cancel (owner only) ----------
    async def cancel_leave(self, actor: Actor, leave_id: int, context: Optional[Dict] = None) -> LeaveResponse:
        try:
            leave = await self._get_for_update(leave_id)
            if leave.employee_id != actor.employee_id:
                raise NotOwnerError()
            self._ensure_pending(leave)

            before = model_snapshot(leave)
            leave.status = LeaveStatus.CANCELLED
            leave.updated_by = actor.employee_id

            balance = await self.ledger.find(leave.employee_id, leave.start_date.year, leave.leave_type)
            if balance:
                self.ledger.release(balance, leave.total_days)

            await self.session.commit()
            await self.session.refresh(leave)

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error cancelling leave {leave_id}: {e}")
            raise HTTPException(status_code=500, detail="Error cancelling leave")

        response = LeaveResponse.model_validate(leave, from_attributes=True)
        logger.info(f"Leave {leave_id} cancelled by employee {actor.employee_id}")
        await self.audit.log(
            "CANCEL_LEAVE", "Leave", leave.id, actor,
            changes={"before": before, "after": model_snapshot(leave)}, context=context
        )
        return response

    # ---------- Retrieval ----------
    async def get_leaves(
        self,
        actor: Actor,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page_index: int = 1,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get paginated leave applications with filtering"""
        target_id = RoleChecker(actor).resolve_target(employee_id, "leave")

        conditions = [Leave.employee_id == target_id, Leave.is_deleted == False]
        if status:
            conditions.append(Leave.status == status)
        if leave_type:
            conditions.append(Leave.leave_type == leave_type)
        if start_date and end_date:
            conditions.append(or_(
                Leave.start_date.between(start_date, end_date),
                Leave.end_date.between(start_date, end_date)
            ))

        total_count = await self.session.scalar(
            select(func.count(Leave.id)).where(and_(*conditions))
        )

        skip = (page_index - 1) * page_size

        result = await self.session.execute(
            select(Leave)
            .where(and_(*conditions))
            .order_by(Leave.start_date.desc())
            .offset(skip)
            .limit(page_size)
        )
        leaves = result.scalars().all()

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": [LeaveResponse.model_validate(l, from_attributes=True) for l in leaves]
        }

    async def get_leave(self, actor: Actor, leave_id: int) -> LeaveResponse:
        result = await self.session.execute(
            select(Leave).where(Leave.id == leave_id, Leave.is_deleted == False)
        )
        leave = result.scalar_one_or_none()
        if not leave:
            raise NotFoundError("Leave application not found")
        RoleChecker(actor).ensure_can_view(leave.employee_id, "leave")
        return LeaveResponse.model_validate(leave, from_attributes=True)
