from datetime import time
from sqlalchemy import Column, Integer, String, Boolean, Text, Float, ForeignKey, Date, Time, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.shared.columns import enum_column_type
from app.models.shared.enums import AttendanceStatus

class Attendance(BaseModel):
    __tablename__ = 'attendances'
    __table_args__ = (
        UniqueConstraint('employee_id', 'attendance_date', name='uq_attendance_employee_date'),
    )
    
    employee_id = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    attendance_date = Column(Date, nullable=False)
    check_in_time = Column(Time)
    check_out_time = Column(Time)
    expected_check_in = Column(Time, default=time(9, 0))
    expected_check_out = Column(Time, default=time(18, 0))
    is_late = Column(Boolean, default=False)
    late_minutes = Column(Integer, default=0)
    is_early_exit = Column(Boolean, default=False)
    early_exit_minutes = Column(Integer, default=0)
    work_hours = Column(Float)
    status = Column(enum_column_type(AttendanceStatus), nullable=False, default=AttendanceStatus.ABSENT)
    check_in_location = Column(String(255))
    check_out_location = Column(String(255))
    remarks = Column(Text)
    
    # Relationships
    employee = relationship("Employee", back_populates="attendances")
