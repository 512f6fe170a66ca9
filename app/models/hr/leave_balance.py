from sqlalchemy import Column, Integer, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.shared.columns import enum_column_type
from app.models.shared.enums import LeaveType

class LeaveBalance(BaseModel):
    __tablename__ = 'leave_balances'
    __table_args__ = (
        UniqueConstraint('employee_id', 'year', 'leave_type', name='uq_leave_balance_employee_year_type'),
    )
    
    employee_id = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    leave_type = Column(enum_column_type(LeaveType), nullable=False)
    total_allocated = Column(Float, nullable=False, default=0)
    used = Column(Float, nullable=False, default=0)
    pending = Column(Float, nullable=False, default=0)
    balance = Column(Float, nullable=False, default=0)  # total_allocated - used - pending
    
    # Relationships
    employee = relationship("Employee", back_populates="leave_balances")

    def __repr__(self):
        return (
            f"<LeaveBalance employee={self.employee_id} {self.year} {self.leave_type} "
            f"alloc={self.total_allocated} used={self.used} pending={self.pending} balance={self.balance}>"
        )
