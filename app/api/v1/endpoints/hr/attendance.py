from fastapi import APIRouter, Depends, Query
from typing import Dict, Optional
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import get_audit_context, get_current_actor, require_privileged
from app.auth.permissions import Actor
from app.core.database import get_async_session
from app.schemas.common.pagination import PaginatedResponse
from app.services.hr.attendance_service import AttendanceService
from app.schemas.hr.attendance_schema import (
    AttendanceResponse, AttendanceStatsResponse, AttendanceUpdate, CheckInRequest, CheckOutRequest
)
from app.models.shared.enums import AttendanceStatus

router = APIRouter()

@router.post("/check-in", response_model=AttendanceResponse)
async def check_in(
    data: Optional[CheckInRequest] = None,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor),
    context: Dict = Depends(get_audit_context)
):
    """Check in for today (or the given date)"""
    data = data or CheckInRequest()
    service = AttendanceService(session)
    return await service.check_in(
        actor,
        attendance_date=data.date,
        check_in_time=data.check_in_time,
        location=data.location,
        context=context
    )

@router.post("/check-out", response_model=AttendanceResponse)
async def check_out(
    data: Optional[CheckOutRequest] = None,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor),
    context: Dict = Depends(get_audit_context)
):
    """Check out for today (or the given date)"""
    data = data or CheckOutRequest()
    service = AttendanceService(session)
    return await service.check_out(
        actor,
        attendance_date=data.date,
        check_out_time=data.check_out_time,
        location=data.location,
        context=context
    )

@router.get("/", response_model=PaginatedResponse[AttendanceResponse])
async def get_attendance(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    employee_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000),
    status: Optional[AttendanceStatus] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor)
):
    """Get attendance records with filtering and pagination"""
    service = AttendanceService(session)
    return await service.get_attendance(
        actor,
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        month=month,
        year=year,
        status=status,
        page_index=page_index,
        page_size=page_size
    )

@router.get("/stats", response_model=AttendanceStatsResponse)
async def get_attendance_stats(
    employee_id: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000),
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor)
):
    """Monthly attendance statistics"""
    service = AttendanceService(session)
    return await service.get_attendance_stats(actor, employee_id=employee_id, month=month, year=year)

@router.put("/{attendance_id}", response_model=AttendanceResponse)
async def update_attendance(
    attendance_id: int,
    data: AttendanceUpdate,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(require_privileged),
    context: Dict = Depends(get_audit_context)
):
    """Correct an attendance record (HR / Executive / System Admin)"""
    service = AttendanceService(session)
    return await service.update_attendance(actor, attendance_id, data, context=context)
