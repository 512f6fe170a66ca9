from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from datetime import date

from app.auth.permissions import Actor
from app.models.hr.holiday import Holiday
from app.models.shared.enums import HolidayType
from app.schemas.hr.holiday_schema import HolidayCreate, HolidayUpdate, HolidayResponse
from app.core.exceptions import ConflictError, NotFoundError
from app.core.logging import logger
from app.services.audit.audit_service import AuditService
from app.utils.date_time_serializer import model_snapshot

class HolidayService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    # region Lookups used by attendance and calendar
    async def is_holiday(self, day: date) -> bool:
        """True iff an active holiday exists on that exact date"""
        result = await self.db.execute(
            select(Holiday.id).where(
                Holiday.date == day,
                Holiday.is_active == True,
                Holiday.is_deleted == False
            )
        )
        return result.first() is not None

    async def get_holidays_between(self, start: date, end: date) -> List[Holiday]:
        result = await self.db.scalars(
            select(Holiday).where(
                Holiday.date >= start,
                Holiday.date <= end,
                Holiday.is_active == True,
                Holiday.is_deleted == False
            ).order_by(Holiday.date)
        )
        return list(result.all())
    # endregion

    async def _find_duplicate(self, day: date, year: int, exclude_id: Optional[int] = None) -> Optional[Holiday]:
        conditions = [Holiday.date == day, Holiday.year == year, Holiday.is_deleted == False]
        if exclude_id is not None:
            conditions.append(Holiday.id != exclude_id)
        result = await self.db.execute(select(Holiday).where(*conditions))
        return result.scalars().first()

    async def create_holiday(self, holiday_data: HolidayCreate, actor: Actor, context: Optional[Dict] = None) -> HolidayResponse:
        """Create a new holiday"""
        try:
            year = holiday_data.year or holiday_data.date.year
            if await self._find_duplicate(holiday_data.date, year):
                raise ConflictError(f"Holiday already exists for {holiday_data.date}")

            holiday = Holiday(
                **holiday_data.dict(exclude={"year"}),
                year=year,
                is_active=True,
                created_by=actor.employee_id
            )
            self.db.add(holiday)
            await self.db.commit()
            await self.db.refresh(holiday)

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error creating holiday: {str(e)}")
            raise

        response = HolidayResponse.model_validate(holiday, from_attributes=True)
        logger.info(f"Holiday created: {holiday.name} on {holiday.date} by employee {actor.employee_id}")
        await self.audit.log(
            "CREATE_HOLIDAY", "Holiday", holiday.id, actor,
            changes={"created": model_snapshot(holiday)}, context=context
        )
        return response

    async def get_holidays(
        self,
        page_index: int = 1,
        page_size: int = 100,
        year: Optional[int] = None,
        holiday_type: Optional[HolidayType] = None,
        is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        """Retrieve holidays with pagination and optional filters"""
        conditions = [Holiday.is_deleted == False]

        if is_active is not None:
            conditions.append(Holiday.is_active == is_active)
        if year:
            conditions.append(Holiday.year == year)
        if holiday_type:
            conditions.append(Holiday.holiday_type == holiday_type)

        # Get total count
        total_count = await self.db.scalar(
            select(func.count(Holiday.id)).where(*conditions)
        )

        # Calculate offset
        skip = (page_index - 1) * page_size

        holidays = await self.db.scalars(
            select(Holiday)
            .where(*conditions)
            .order_by(Holiday.date.asc())
            .offset(skip)
            .limit(page_size)
        )

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": holidays.all()
        }

    async def get_holiday(self, holiday_id: int) -> Holiday:
        result = await self.db.execute(
            select(Holiday).where(
                Holiday.id == holiday_id,
                Holiday.is_deleted == False
            )
        )
        holiday = result.scalar_one_or_none()
        if not holiday:
            raise NotFoundError(f"Holiday with ID {holiday_id} not found")
        return holiday

    async def update_holiday(self, holiday_id: int, holiday_data: HolidayUpdate, actor: Actor, context: Optional[Dict] = None) -> HolidayResponse:
        """Update a holiday record"""
        try:
            holiday = await self.get_holiday(holiday_id)
            before = model_snapshot(holiday)

            update_data = holiday_data.dict(exclude_unset=True)
            if "date" in update_data and update_data["date"] is not None:
                year = update_data.get("year") or update_data["date"].year
                if await self._find_duplicate(update_data["date"], year, exclude_id=holiday_id):
                    raise ConflictError(f"Holiday already exists for {update_data['date']}")
                update_data["year"] = year

            for field, value in update_data.items():
                setattr(holiday, field, value)
            holiday.updated_by = actor.employee_id

            await self.db.commit()
            await self.db.refresh(holiday)

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error updating holiday {holiday_id}: {str(e)}")
            raise

        response = HolidayResponse.model_validate(holiday, from_attributes=True)
        logger.info(f"Holiday updated: {holiday.name} by employee {actor.employee_id}")
        await self.audit.log(
            "UPDATE_HOLIDAY", "Holiday", holiday.id, actor,
            changes={"before": before, "after": model_snapshot(holiday)}, context=context
        )
        return response

    async def delete_holiday(self, holiday_id: int, actor: Actor, context: Optional[Dict] = None) -> bool:
        """Soft delete a holiday"""
        try:
            holiday = await self.get_holiday(holiday_id)
            holiday.is_active = False
            holiday.is_deleted = True
            holiday.updated_by = actor.employee_id
            await self.db.commit()
            await self.db.refresh(holiday)

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error deleting holiday {holiday_id}: {str(e)}")
            raise

        logger.info(f"Holiday deleted: {holiday.name} by employee {actor.employee_id}")
        await self.audit.log(
            "DELETE_HOLIDAY", "Holiday", holiday_id, actor,
            changes={"deleted": model_snapshot(holiday)}, context=context
        )
        return True
