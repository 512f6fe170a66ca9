from pydantic import BaseModel, validator
from typing import Optional
from datetime import date, datetime
from app.models.shared.enums import LeaveStatus, LeaveType, Role

class LeaveApply(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str] = None

class LeaveReject(BaseModel):
    rejection_reason: str

    @validator('rejection_reason')
    def validate_reason(cls, v):
        if not v or not v.strip():
            raise ValueError('Rejection reason is required')
        return v.strip()

class LeaveResponse(BaseModel):
    id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: float
    is_extra_leave: bool
    status: LeaveStatus
    reason: Optional[str] = None
    applied_by: int
    approved_by: Optional[int] = None
    approved_by_role: Optional[Role] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
