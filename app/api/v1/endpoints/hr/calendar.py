from fastapi import APIRouter, Depends, Query
from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import get_audit_context, get_current_actor, require_privileged
from app.auth.permissions import Actor
from app.core.database import get_async_session
from app.services.hr.calendar_service import CalendarService
from app.services.hr.leave_balance_service import LeaveBalanceService
from app.schemas.hr.calendar_schema import MonthlyCalendarResponse
from app.schemas.hr.leave_balance_schema import LeaveAllocationUpdate, LeaveBalanceResponse, LeaveBalanceSummary

router = APIRouter()

@router.get("/monthly", response_model=MonthlyCalendarResponse)
async def get_monthly_calendar(
    employee_id: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000),
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor)
):
    """Per-day status for a month with statistics and leave balances"""
    service = CalendarService(session)
    return await service.get_monthly_calendar(actor, employee_id=employee_id, month=month, year=year)

@router.get("/leave-balance", response_model=LeaveBalanceSummary)
async def get_leave_balance(
    employee_id: Optional[int] = Query(None),
    year: Optional[int] = Query(None, ge=2000),
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor)
):
    """Leave balances for a year with totals"""
    service = LeaveBalanceService(session)
    return await service.get_leave_balance(actor, employee_id=employee_id, year=year)

@router.put("/leave-allocation", response_model=LeaveBalanceResponse)
async def update_leave_allocation(
    data: LeaveAllocationUpdate,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(require_privileged),
    context: Dict = Depends(get_audit_context)
):
    """Set the yearly allocation for one leave type (HR / Executive / System Admin)"""
    service = LeaveBalanceService(session)
    return await service.update_leave_allocation(
        actor,
        employee_id=data.employee_id,
        year=data.year,
        leave_type=data.leave_type,
        total_allocated=data.total_allocated,
        context=context
    )
