from sqlalchemy import Column, Integer, String, Boolean, Text, Date
from app.db.base import BaseModel
from app.models.shared.columns import enum_column_type
from app.models.shared.enums import HolidayType

class Holiday(BaseModel):
    __tablename__ = 'holidays'
    
    name = Column(String(100), nullable=False)
    date = Column(Date, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    holiday_type = Column(enum_column_type(HolidayType), nullable=False, default=HolidayType.NATIONAL)
    description = Column(Text)
    is_active = Column(Boolean, default=True)
