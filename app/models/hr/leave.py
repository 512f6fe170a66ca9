from sqlalchemy import Column, Integer, Boolean, Text, Float, ForeignKey, Date, DateTime
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.shared.columns import enum_column_type
from app.models.shared.enums import LeaveStatus, LeaveType, Role

class Leave(BaseModel):
    __tablename__ = 'leaves'
    
    employee_id = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    leave_type = Column(enum_column_type(LeaveType), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_days = Column(Float, nullable=False)  # business days, weekends excluded
    is_extra_leave = Column(Boolean, default=False)  # requested days exceeded available balance
    status = Column(enum_column_type(LeaveStatus), nullable=False, default=LeaveStatus.PENDING)
    reason = Column(Text)
    applied_by = Column(Integer, nullable=False)
    approved_by = Column(Integer, ForeignKey('employees.id'), nullable=True)
    approved_by_role = Column(enum_column_type(Role), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text)
    
    # Relationships
    employee = relationship("Employee", back_populates="leaves", foreign_keys=[employee_id])
