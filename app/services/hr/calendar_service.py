import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.auth.permissions import Actor, RoleChecker
from app.models.hr.attendance import Attendance
from app.models.hr.holiday import Holiday
from app.models.hr.leave import Leave
from app.models.shared.enums import AttendanceStatus, CalendarDayStatus, LeaveStatus
from app.schemas.hr.calendar_schema import (
    CalendarDay, CalendarStatistics, DayAttendance, DayHoliday, DayLeave, MonthlyCalendarResponse
)
from app.schemas.hr.leave_balance_schema import LeaveBalanceResponse
from app.services.hr.employee_service import EmployeeService
from app.services.hr.holiday_service import HolidayService
from app.services.hr.leave_balance_service import LeaveBalanceService
from app.utils.date_utils import is_weekend, iter_days, local_today, month_bounds

logger = logging.getLogger(__name__)


@dataclass
class DayContext:
    """Everything known about one day of the month"""
    day: date
    holiday: Optional[Holiday] = None
    leave: Optional[Leave] = None
    attendance: Optional[Attendance] = None


def _attendance_label(ctx: DayContext) -> Optional[str]:
    return ctx.attendance.status.value if ctx.attendance and ctx.attendance.status else None


# Ordered (label, predicate); the first predicate that matches decides the day.
# A callable label is evaluated against the day.
STATUS_RULES: List[Tuple[object, Callable[[DayContext], bool]]] = [
    (CalendarDayStatus.HOLIDAY.value, lambda ctx: ctx.holiday is not None),
    (CalendarDayStatus.LEAVE.value, lambda ctx: ctx.leave is not None and ctx.leave.status == LeaveStatus.APPROVED),
    (CalendarDayStatus.LEAVE_PENDING.value, lambda ctx: ctx.leave is not None and ctx.leave.status == LeaveStatus.PENDING),
    (_attendance_label, lambda ctx: _attendance_label(ctx) is not None),
    (CalendarDayStatus.WEEKEND.value, lambda ctx: is_weekend(ctx.day)),
    (CalendarDayStatus.ABSENT.value, lambda ctx: True),
]


def resolve_day_status(ctx: DayContext) -> str:
    for label, matches in STATUS_RULES:
        if matches(ctx):
            return label(ctx) if callable(label) else label
    return CalendarDayStatus.ABSENT.value


class CalendarService:
    def __init__(self, session: AsyncSession, ledger: Optional[LeaveBalanceService] = None):
        self.session = session
        self.holiday_service = HolidayService(session)
        self.employee_service = EmployeeService(session)
        self.ledger = ledger or LeaveBalanceService(session)

    async def _get_attendance(self, employee_id: int, start: date, end: date) -> Dict[date, Attendance]:
        result = await self.session.execute(
            select(Attendance).where(
                Attendance.employee_id == employee_id,
                Attendance.attendance_date.between(start, end)
            )
        )
        return {a.attendance_date: a for a in result.scalars().all()}

    async def _get_leaves(self, employee_id: int, start: date, end: date) -> List[Leave]:
        result = await self.session.execute(
            select(Leave).where(
                Leave.employee_id == employee_id,
                Leave.status.in_((LeaveStatus.APPROVED, LeaveStatus.PENDING)),
                Leave.is_deleted == False,
                Leave.start_date <= end,
                Leave.end_date >= start
            ).order_by(Leave.start_date)
        )
        return list(result.scalars().all())

    @staticmethod
    def _leave_on(day: date, leaves: List[Leave]) -> Optional[Leave]:
        """Approved application first, then pending"""
        covering = [l for l in leaves if l.start_date <= day <= l.end_date]
        for leave in covering:
            if leave.status == LeaveStatus.APPROVED:
                return leave
        return covering[0] if covering else None

    async def get_monthly_calendar(
        self,
        actor: Actor,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> MonthlyCalendarResponse:
        target_id = RoleChecker(actor).resolve_target(employee_id, "calendar")
        today = local_today()
        month = month or today.month
        year = year or today.year
        start, end = month_bounds(year, month)

        await self.employee_service.get_active_employee(target_id)

        holidays = {h.date: h for h in await self.holiday_service.get_holidays_between(start, end)}
        attendance_by_day = await self._get_attendance(target_id, start, end)
        leaves = await self._get_leaves(target_id, start, end)

        calendar: List[CalendarDay] = []
        counts = {
            "present": 0, "absent": 0, "half_day": 0,
            "leave": 0, "holiday": 0, "weekend": 0
        }
        late_count = early_exit_count = 0
        total_late_minutes = total_early_exit_minutes = 0
        total_work_hours = 0.0
        worked_days = 0

        for day in iter_days(start, end):
            ctx = DayContext(
                day=day,
                holiday=holidays.get(day),
                leave=self._leave_on(day, leaves),
                attendance=attendance_by_day.get(day)
            )
            status = resolve_day_status(ctx)

            if status == CalendarDayStatus.HOLIDAY.value:
                counts["holiday"] += 1
            elif status in (CalendarDayStatus.LEAVE.value, CalendarDayStatus.LEAVE_PENDING.value):
                counts["leave"] += 1
            elif status == AttendanceStatus.PRESENT.value:
                counts["present"] += 1
            elif status == AttendanceStatus.HALF_DAY.value:
                counts["half_day"] += 1
            elif status == AttendanceStatus.LEAVE.value:
                counts["leave"] += 1
            elif status == CalendarDayStatus.ABSENT.value:
                counts["absent"] += 1
            if is_weekend(day):
                counts["weekend"] += 1

            attendance_detail = None
            if ctx.attendance:
                a = ctx.attendance
                attendance_detail = DayAttendance(
                    status=a.status.value,
                    check_in_time=a.check_in_time,
                    check_out_time=a.check_out_time,
                    work_hours=a.work_hours,
                    is_late=bool(a.is_late),
                    late_minutes=a.late_minutes or 0,
                    is_early_exit=bool(a.is_early_exit),
                    early_exit_minutes=a.early_exit_minutes or 0
                )
                if a.is_late:
                    late_count += 1
                    total_late_minutes += a.late_minutes or 0
                if a.is_early_exit:
                    early_exit_count += 1
                    total_early_exit_minutes += a.early_exit_minutes or 0
                if (a.work_hours or 0) > 0:
                    total_work_hours += a.work_hours
                    worked_days += 1

            calendar.append(CalendarDay(
                date=day,
                day=day.day,
                day_of_week=day.strftime("%A"),
                is_weekend=is_weekend(day),
                status=status,
                attendance=attendance_detail,
                holiday=DayHoliday(name=ctx.holiday.name, holiday_type=ctx.holiday.holiday_type) if ctx.holiday else None,
                leave=DayLeave(
                    id=ctx.leave.id,
                    leave_type=ctx.leave.leave_type,
                    status=ctx.leave.status,
                    total_days=ctx.leave.total_days
                ) if ctx.leave else None
            ))

        statistics = CalendarStatistics(
            total_days=len(calendar),
            **counts,
            late_count=late_count,
            early_exit_count=early_exit_count,
            total_work_hours=round(total_work_hours, 2),
            average_work_hours=round(total_work_hours / worked_days, 2) if worked_days else 0,
            total_late_minutes=total_late_minutes,
            total_early_exit_minutes=total_early_exit_minutes
        )

        balances = await self.ledger.get_balances(target_id, year)
        logger.info(f"Monthly calendar built: employee {target_id}, {year}-{month:02d}")

        return MonthlyCalendarResponse(
            employee_id=target_id,
            month=month,
            year=year,
            calendar=calendar,
            statistics=statistics,
            leave_balances=[LeaveBalanceResponse.model_validate(b, from_attributes=True) for b in balances]
        )
