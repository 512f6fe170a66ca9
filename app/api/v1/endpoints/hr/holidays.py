from fastapi import APIRouter, Depends, Query
from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import get_audit_context, get_current_actor, require_privileged
from app.auth.permissions import Actor
from app.core.database import get_async_session
from app.schemas.common.pagination import PaginatedResponse
from app.services.hr.holiday_service import HolidayService
from app.schemas.hr.holiday_schema import HolidayCreate, HolidayUpdate, HolidayResponse
from app.models.shared.enums import HolidayType

router = APIRouter()

@router.post("/", response_model=HolidayResponse)
async def create_holiday(
    holiday: HolidayCreate,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(require_privileged),
    context: Dict = Depends(get_audit_context)
):
    """Create a new holiday"""
    service = HolidayService(session)
    return await service.create_holiday(holiday, actor, context)

@router.get("/", response_model=PaginatedResponse[HolidayResponse])
async def get_holidays(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    year: Optional[int] = Query(None),
    holiday_type: Optional[HolidayType] = Query(None),
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor)
):
    """Get holidays with filtering and pagination"""
    service = HolidayService(session)
    return await service.get_holidays(
        page_index=page_index,
        page_size=page_size,
        year=year,
        holiday_type=holiday_type,
        is_active=is_active
    )

@router.get("/{holiday_id}", response_model=HolidayResponse)
async def get_holiday(
    holiday_id: int,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(get_current_actor)
):
    """Get a specific holiday by ID"""
    service = HolidayService(session)
    return await service.get_holiday(holiday_id)

@router.put("/{holiday_id}", response_model=HolidayResponse)
async def update_holiday(
    holiday_id: int,
    holiday: HolidayUpdate,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(require_privileged),
    context: Dict = Depends(get_audit_context)
):
    """Update holiday"""
    service = HolidayService(session)
    return await service.update_holiday(holiday_id, holiday, actor, context)

@router.delete("/{holiday_id}")
async def delete_holiday(
    holiday_id: int,
    session: AsyncSession = Depends(get_async_session),
    actor: Actor = Depends(require_privileged),
    context: Dict = Depends(get_audit_context)
):
    """Delete holiday"""
    service = HolidayService(session)
    result = await service.delete_holiday(holiday_id, actor, context)
    return {"message": "Holiday deleted successfully", "success": result}
