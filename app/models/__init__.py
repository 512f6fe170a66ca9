from app.models.auth.audit_log import AuditLog
from app.models.hr.attendance import Attendance
from app.models.hr.employee import Employee
from app.models.hr.holiday import Holiday
from app.models.hr.leave import Leave
from app.models.hr.leave_balance import LeaveBalance


__all__ = [
    "AuditLog",
    "Attendance",
    "Employee",
    "Holiday",
    "Leave",
    "LeaveBalance",
]
