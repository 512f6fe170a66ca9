import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.exceptions import NotFoundError
from app.models.hr.employee import Employee

logger = logging.getLogger(__name__)


class EmployeeService:
    """Read-only access to employee records owned by the HR directory"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_employee(self, employee_id: int, lock: bool = False) -> Employee:
        """Active employee; with lock, the row stays locked until the caller's transaction ends"""
        query = select(Employee).where(
            Employee.id == employee_id,
            Employee.is_active == True,
            Employee.is_deleted == False
        )
        if lock:
            query = query.with_for_update()
        result = await self.session.execute(query)
        employee = result.scalar_one_or_none()
        if not employee:
            logger.info(f"Employee {employee_id} not found or inactive")
            raise NotFoundError(f"Employee with ID {employee_id} not found")
        return employee
