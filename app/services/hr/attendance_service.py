import logging
from typing import Any, Optional, Dict, Tuple
from datetime import date, time
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, func, select

from app.auth.permissions import Actor, RoleChecker
from app.core.config import settings
from app.core.exceptions import (
    AlreadyCheckedInError, AlreadyCheckedOutError, NoCheckInError, NotFoundError, ValidationError
)
from app.models.hr.attendance import Attendance
from app.models.shared.enums import AttendanceStatus
from app.schemas.hr.attendance_schema import AttendanceResponse, AttendanceUpdate, AttendanceStats, AttendanceStatsResponse
from app.services.audit.audit_service import AuditService
from app.services.hr.employee_service import EmployeeService
from app.services.hr.holiday_service import HolidayService
from app.utils.date_time_serializer import model_snapshot
from app.utils.date_utils import hours_between, local_now, local_today, month_bounds, parse_time_of_day, to_minutes

logger = logging.getLogger(__name__)

def default_check_in() -> time:
    return parse_time_of_day(settings.DEFAULT_CHECK_IN)

def default_check_out() -> time:
    return parse_time_of_day(settings.DEFAULT_CHECK_OUT)

def compute_lateness(check_in_time: time, expected_check_in: time) -> Tuple[bool, int]:
    """(is_late, late_minutes) for a check-in against the expected time"""
    diff = to_minutes(check_in_time) - to_minutes(expected_check_in)
    return (True, diff) if diff > 0 else (False, 0)

def compute_early_exit(check_out_time: time, expected_check_out: time) -> Tuple[bool, int]:
    """(is_early_exit, early_exit_minutes) for a check-out against the expected time"""
    diff = to_minutes(expected_check_out) - to_minutes(check_out_time)
    return (True, diff) if diff > 0 else (False, 0)

def compute_work_hours(check_in_time: time, check_out_time: time) -> float:
    """Hours between check-in and check-out on the same calendar day"""
    hours = hours_between(check_in_time, check_out_time)
    if not 0 <= hours <= 24:
        raise ValidationError("Check-out time cannot be before check-in time")
    return hours

class AttendanceService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.holiday_service = HolidayService(session)
        self.employee_service = EmployeeService(session)
        self.audit = AuditService(session)

    # region Attendance Helper Methods
    async def _get_record(self, employee_id: int, attendance_date: date, lock: bool = False) -> Optional[Attendance]:
        query = select(Attendance).where(
            Attendance.employee_id == employee_id,
            Attendance.attendance_date == attendance_date
        )
        if lock:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalars().first()

    @staticmethod
    def _now_time() -> time:
        return local_now().time().replace(microsecond=0)
    # endregion

    # ---------- Check-in ----------
    async def check_in(
        self,
        actor: Actor,
        attendance_date: Optional[date] = None,
        check_in_time: Optional[time] = None,
        location: Optional[str] = None,
        context: Optional[Dict] = None,
    ) -> AttendanceResponse:
        context = context or {}
        attendance_date = attendance_date or local_today()
        check_in_time = check_in_time or self._now_time()

        try:
            await self.employee_service.get_active_employee(actor.employee_id)

            existing = await self._get_record(actor.employee_id, attendance_date, lock=True)
            if existing and existing.check_in_time:
                raise AlreadyCheckedInError()

            is_holiday = await self.holiday_service.is_holiday(attendance_date)
            status = AttendanceStatus.HOLIDAY if is_holiday else AttendanceStatus.PRESENT

            expected_check_in = (existing.expected_check_in if existing else None) or default_check_in()
            is_late, late_minutes = compute_lateness(check_in_time, expected_check_in)

            if existing:
                attendance = existing
            else:
                attendance = Attendance(
                    employee_id=actor.employee_id,
                    attendance_date=attendance_date,
                    expected_check_out=default_check_out(),
                    created_by=actor.employee_id
                )
                self.session.add(attendance)

            attendance.check_in_time = check_in_time
            attendance.check_in_location = location or context.get("ip_address")
            attendance.status = status
            attendance.expected_check_in = expected_check_in
            attendance.is_late = is_late
            attendance.late_minutes = late_minutes

            await self.session.commit()
            await self.session.refresh(attendance)

        except HTTPException:
            await self.session.rollback()
            raise
        except IntegrityError:
            # A concurrent check-in created the row first
            await self.session.rollback()
            raise AlreadyCheckedInError()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error checking in employee {actor.employee_id}: {e}")
            raise HTTPException(status_code=500, detail="Error marking check-in")

        response = AttendanceResponse.model_validate(attendance, from_attributes=True)
        logger.info(f"Checked in: Employee {actor.employee_id} - Status: {status.value}, Date: {attendance_date}, Late: {late_minutes}m")
        await self.audit.log(
            "CHECK_IN", "Attendance", attendance.id, actor,
            metadata={"date": attendance_date, "check_in_time": check_in_time}, context=context
        )
        return response

    # ---------- Check-out ----------
    async def check_out(
        self,
        actor: Actor,
        attendance_date: Optional[date] = None,
        check_out_time: Optional[time] = None,
        location: Optional[str] = None,
        context: Optional[Dict] = None,
    ) -> AttendanceResponse:
        context = context or {}
        attendance_date = attendance_date or local_today()
        check_out_time = check_out_time or self._now_time()

        try:
            attendance = await self._get_record(actor.employee_id, attendance_date, lock=True)
            if not attendance or not attendance.check_in_time:
                raise NoCheckInError()
            if attendance.check_out_time:
                raise AlreadyCheckedOutError()

            work_hours = compute_work_hours(attendance.check_in_time, check_out_time)
            expected_check_out = attendance.expected_check_out or default_check_out()
            is_early_exit, early_exit_minutes = compute_early_exit(check_out_time, expected_check_out)

            attendance.check_out_time = check_out_time
            attendance.check_out_location = location or context.get("ip_address")
            attendance.work_hours = work_hours
            attendance.expected_check_out = expected_check_out
            attendance.is_early_exit = is_early_exit
            attendance.early_exit_minutes = early_exit_minutes
            attendance.updated_by = actor.employee_id

            await self.session.commit()
            await self.session.refresh(attendance)

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error checking out employee {actor.employee_id}: {e}")
            raise HTTPException(status_code=500, detail="Error marking check-out")

        response = AttendanceResponse.model_validate(attendance, from_attributes=True)
        logger.info(f"Checked out: Employee {actor.employee_id}, Date: {attendance_date}, Hours: {work_hours}")
        await self.audit.log(
            "CHECK_OUT", "Attendance", attendance.id, actor,
            metadata={"date": attendance_date, "work_hours": work_hours}, context=context
        )
        return response

    # ---------- Manual correction (HR / Executive / System Admin) ----------
    async def update_attendance(
        self,
        actor: Actor,
        attendance_id: int,
        data: AttendanceUpdate,
        context: Optional[Dict] = None,
    ) -> AttendanceResponse:
        RoleChecker(actor).require_privileged()

        try:
            result = await self.session.execute(
                select(Attendance).where(Attendance.id == attendance_id).with_for_update()
            )
            attendance = result.scalar_one_or_none()
            if not attendance:
                raise NotFoundError("Attendance record not found")

            before = model_snapshot(attendance)
            changes = data.dict(exclude_unset=True)

            expected_in = data.expected_check_in or attendance.expected_check_in or default_check_in()
            expected_out = data.expected_check_out or attendance.expected_check_out or default_check_out()
            check_in_time = data.check_in_time or attendance.check_in_time
            check_out_time = data.check_out_time or attendance.check_out_time

            check_in_changed = data.check_in_time is not None or data.expected_check_in is not None
            check_out_changed = data.check_out_time is not None or data.expected_check_out is not None

            if check_in_changed and check_in_time:
                attendance.is_late, attendance.late_minutes = compute_lateness(check_in_time, expected_in)
            if check_out_changed and check_out_time:
                attendance.is_early_exit, attendance.early_exit_minutes = compute_early_exit(check_out_time, expected_out)
            if (data.check_in_time or data.check_out_time) and check_in_time and check_out_time:
                attendance.work_hours = compute_work_hours(check_in_time, check_out_time)

            attendance.check_in_time = check_in_time
            attendance.check_out_time = check_out_time
            attendance.expected_check_in = expected_in
            attendance.expected_check_out = expected_out
            if data.status is not None:
                attendance.status = data.status
            if "remarks" in changes:
                attendance.remarks = data.remarks
            attendance.updated_by = actor.employee_id

            await self.session.commit()
            await self.session.refresh(attendance)

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating attendance {attendance_id}: {e}")
            raise HTTPException(status_code=500, detail="Error updating attendance")

        response = AttendanceResponse.model_validate(attendance, from_attributes=True)
        logger.info(f"Attendance {attendance_id} updated by employee {actor.employee_id}: {sorted(changes)}")
        await self.audit.log(
            "UPDATE_ATTENDANCE", "Attendance", attendance.id, actor,
            changes={"before": before, "after": model_snapshot(attendance)}, context=context
        )
        return response

    # ---------- Attendance Retrieval ----------
    async def get_attendance(
        self,
        actor: Actor,
        employee_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        page_index: int = 1,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get paginated attendance records with filtering"""
        target_id = RoleChecker(actor).resolve_target(employee_id, "attendance")

        conditions = [Attendance.employee_id == target_id]
        if start_date and end_date:
            conditions.append(Attendance.attendance_date.between(start_date, end_date))
        elif month and year:
            first_day, last_day = month_bounds(year, month)
            conditions.append(Attendance.attendance_date.between(first_day, last_day))
        if status:
            conditions.append(Attendance.status == status)

        total_count = await self.session.scalar(
            select(func.count(Attendance.id)).where(and_(*conditions))
        )

        # Calculate offset
        skip = (page_index - 1) * page_size

        result = await self.session.execute(
            select(Attendance)
            .where(and_(*conditions))
            .order_by(Attendance.attendance_date.desc())
            .offset(skip)
            .limit(page_size)
        )
        attendances = result.scalars().all()

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": [AttendanceResponse.model_validate(a, from_attributes=True) for a in attendances]
        }

    # ---------- Summary ----------
    async def get_attendance_stats(
        self,
        actor: Actor,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> AttendanceStatsResponse:
        target_id = RoleChecker(actor).resolve_target(employee_id, "attendance")
        today = local_today()
        month = month or today.month
        year = year or today.year
        start, end = month_bounds(year, month)

        result = await self.session.execute(
            select(Attendance).where(
                Attendance.employee_id == target_id,
                Attendance.attendance_date.between(start, end)
            )
        )
        records = result.scalars().all()

        def count(status: AttendanceStatus) -> int:
            return len([r for r in records if r.status == status])

        total_hours = sum(r.work_hours or 0 for r in records)
        worked_days = [r for r in records if (r.work_hours or 0) > 0]

        stats = AttendanceStats(
            total_days=len(records),
            present=count(AttendanceStatus.PRESENT),
            absent=count(AttendanceStatus.ABSENT),
            leave=count(AttendanceStatus.LEAVE),
            half_day=count(AttendanceStatus.HALF_DAY),
            holiday=count(AttendanceStatus.HOLIDAY),
            late_count=len([r for r in records if r.is_late]),
            early_exit_count=len([r for r in records if r.is_early_exit]),
            total_work_hours=round(total_hours, 2),
            average_work_hours=round(total_hours / len(worked_days), 2) if worked_days else 0,
            total_late_minutes=sum(r.late_minutes or 0 for r in records),
            total_early_exit_minutes=sum(r.early_exit_minutes or 0 for r in records),
        )
        return AttendanceStatsResponse(employee_id=target_id, month=month, year=year, stats=stats)
