from pydantic import BaseModel, validator
from typing import Optional
from datetime import date as DateType, datetime, time as TimeType
from app.models.shared.enums import AttendanceStatus

class CheckInRequest(BaseModel):
    date: Optional[DateType] = None
    check_in_time: Optional[TimeType] = None
    location: Optional[str] = None

class CheckOutRequest(BaseModel):
    date: Optional[DateType] = None
    check_out_time: Optional[TimeType] = None
    location: Optional[str] = None

class AttendanceUpdate(BaseModel):
    check_in_time: Optional[TimeType] = None
    check_out_time: Optional[TimeType] = None
    expected_check_in: Optional[TimeType] = None
    expected_check_out: Optional[TimeType] = None
    status: Optional[AttendanceStatus] = None
    remarks: Optional[str] = None

class AttendanceResponse(BaseModel):
    id: int
    employee_id: int
    attendance_date: DateType
    check_in_time: Optional[TimeType] = None
    check_out_time: Optional[TimeType] = None
    expected_check_in: Optional[TimeType] = None
    expected_check_out: Optional[TimeType] = None
    is_late: bool = False
    late_minutes: Optional[int] = None
    is_early_exit: bool = False
    early_exit_minutes: Optional[int] = None
    work_hours: Optional[float] = None
    status: AttendanceStatus
    check_in_location: Optional[str] = None
    check_out_location: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

class AttendanceStats(BaseModel):
    total_days: int
    present: int
    absent: int
    leave: int
    half_day: int
    holiday: int
    late_count: int
    early_exit_count: int
    total_work_hours: float
    average_work_hours: float
    total_late_minutes: int
    total_early_exit_minutes: int

class AttendanceStatsResponse(BaseModel):
    employee_id: int
    month: int
    year: int
    stats: AttendanceStats

    @validator('month')
    def validate_month(cls, v):
        if not 1 <= v <= 12:
            raise ValueError('Month must be between 1 and 12')
        return v
