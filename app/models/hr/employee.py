from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.shared.columns import enum_column_type
from app.models.shared.enums import Role

class Employee(BaseModel):
    __tablename__ = 'employees'
    
    full_name = Column(String(150), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)
    department = Column(String(100))
    role = Column(enum_column_type(Role), nullable=False, default=Role.EMPLOYEE)
    is_active = Column(Boolean, default=True)
    
    # Relationships
    attendances = relationship("Attendance", back_populates="employee")
    leaves = relationship("Leave", back_populates="employee", foreign_keys="Leave.employee_id")
    leave_balances = relationship("LeaveBalance", back_populates="employee")
