from pydantic import BaseModel
from typing import List, Optional
from datetime import date as DateType, time as TimeType
from app.models.shared.enums import HolidayType, LeaveStatus, LeaveType
from app.schemas.hr.leave_balance_schema import LeaveBalanceResponse

class DayAttendance(BaseModel):
    status: str
    check_in_time: Optional[TimeType] = None
    check_out_time: Optional[TimeType] = None
    work_hours: Optional[float] = None
    is_late: bool = False
    late_minutes: int = 0
    is_early_exit: bool = False
    early_exit_minutes: int = 0

class DayHoliday(BaseModel):
    name: str
    holiday_type: HolidayType

class DayLeave(BaseModel):
    id: int
    leave_type: LeaveType
    status: LeaveStatus
    total_days: float

class CalendarDay(BaseModel):
    date: DateType
    day: int
    day_of_week: str
    is_weekend: bool
    status: str
    attendance: Optional[DayAttendance] = None
    holiday: Optional[DayHoliday] = None
    leave: Optional[DayLeave] = None

class CalendarStatistics(BaseModel):
    total_days: int
    present: int
    absent: int
    half_day: int
    leave: int
    holiday: int
    weekend: int
    late_count: int
    early_exit_count: int
    total_work_hours: float
    average_work_hours: float
    total_late_minutes: int
    total_early_exit_minutes: int

class MonthlyCalendarResponse(BaseModel):
    employee_id: int
    month: int
    year: int
    calendar: List[CalendarDay]
    statistics: CalendarStatistics
    leave_balances: List[LeaveBalanceResponse]
