from pydantic import BaseModel, validator
from typing import List, Optional
from app.models.shared.enums import LeaveType

class LeaveAllocationUpdate(BaseModel):
    employee_id: int
    year: int
    leave_type: LeaveType
    total_allocated: float

    @validator('total_allocated')
    def validate_total(cls, v):
        if v < 0:
            raise ValueError('Total allocated cannot be negative')
        return v

class LeaveBalanceResponse(BaseModel):
    id: int
    employee_id: int
    year: int
    leave_type: LeaveType
    total_allocated: float
    used: float
    pending: float
    balance: float

    class Config:
        from_attributes = True

class LeaveBalanceTotals(BaseModel):
    total_allocated: float = 0
    total_used: float = 0
    total_pending: float = 0
    total_balance: float = 0

class LeaveBalanceSummary(BaseModel):
    employee_id: int
    year: int
    leave_balances: List[LeaveBalanceResponse]
    totals: LeaveBalanceTotals
