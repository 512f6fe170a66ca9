from pydantic import BaseModel, validator
from typing import Optional
from datetime import date as DateType, datetime
from app.models.shared.enums import HolidayType

class HolidayBase(BaseModel):
    name: str
    date: DateType
    holiday_type: HolidayType = HolidayType.NATIONAL
    description: Optional[str] = None

class HolidayCreate(HolidayBase):
    year: Optional[int] = None

    @validator('name')
    def validate_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Holiday name must be at least 2 characters')
        return v.strip()

class HolidayUpdate(BaseModel):
    name: Optional[str] = None
    date: Optional[DateType] = None
    year: Optional[int] = None
    holiday_type: Optional[HolidayType] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

class HolidayResponse(HolidayBase):
    id: int
    year: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
