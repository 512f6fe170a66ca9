from fastapi import APIRouter, Depends, Query, status
from typing import Dict, Optional
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import get_audit_context, get_current_actor, require_privileged
from app.auth.permissions import Actor
from app.core.database import get_async_session
from app.schemas.common.pagination import PaginatedResponse
from app.services.hr.leave_service import LeaveService
from app.schemas.hr.leave_schema import LeaveApply, LeaveReject, LeaveResponse
from app.models.shared.enums import LeaveStatus, LeaveType

router = APIRouter()

@router.post("/", response_model=LeaveResponse, status_code=status.HTTP_201_CREATED)
async def apply_leave(
    data: LeaveApply,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor),
    context: Dict = Depends(get_audit_context)
):
    """Apply for leave"""
    service = LeaveService(session)
    return await service.apply_leave(actor, data, context=context)

@router.get("/", response_model=PaginatedResponse[LeaveResponse])
async def get_leaves(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    employee_id: Optional[int] = Query(None),
    leave_status: Optional[LeaveStatus] = Query(None, alias="status"),
    leave_type: Optional[LeaveType] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor)
):
    """Get leave applications with filtering and pagination"""
    service = LeaveService(session)
    return await service.get_leaves(
        actor,
        employee_id=employee_id,
        status=leave_status,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        page_index=page_index,
        page_size=page_size
    )

@router.get("/{leave_id}", response_model=LeaveResponse)
async def get_leave(
    leave_id: int,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor)
):
    """Get a specific leave application by ID"""
    service = LeaveService(session)
    return await service.get_leave(actor, leave_id)

@router.post("/{leave_id}/approve", response_model=LeaveResponse)
async def approve_leave(
    leave_id: int,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(require_privileged),
    context: Dict = Depends(get_audit_context)
):
    """Approve a pending leave application"""
    service = LeaveService(session)
    return await service.approve_leave(actor, leave_id, context=context)

@router.post("/{leave_id}/reject", response_model=LeaveResponse)
async def reject_leave(
    leave_id: int,
    data: LeaveReject,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(require_privileged),
    context: Dict = Depends(get_audit_context)
):
    """Reject a pending leave application"""
    service = LeaveService(session)
    return await service.reject_leave(actor, leave_id, data.rejection_reason, context=context)

@router.post("/{leave_id}/cancel", response_model=LeaveResponse)
async def cancel_leave(
    leave_id: int,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor),
    context: Dict = Depends(get_audit_context)
):
    """Cancel your own pending leave application"""
    service = LeaveService(session)
    return await service.cancel_leave(actor, leave_id, context=context)
