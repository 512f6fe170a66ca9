from enum import Enum

# Enums
class Role(str, Enum):
    SYSTEM_ADMIN = "System Admin"
    EXECUTIVE = "Executive"
    HR = "HR"
    EMPLOYEE = "Employee"
    INTERN = "Intern"

class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    LEAVE = "Leave"
    HOLIDAY = "Holiday"

class LeaveType(str, Enum):
    SICK = "Sick Leave"
    CASUAL = "Casual Leave"
    EARNED = "Earned Leave"
    COMPENSATORY = "Compensatory Off"
    MATERNITY = "Maternity Leave"
    PATERNITY = "Paternity Leave"
    BEREAVEMENT = "Bereavement Leave"
    UNPAID = "Unpaid Leave"
    OTHER = "Other"

class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"

class HolidayType(str, Enum):
    NATIONAL = "National"
    REGIONAL = "Regional"
    COMPANY = "Company"
    RELIGIOUS = "Religious"

class AuditStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    PENDING = "PENDING"

# Calendar day labels that are not attendance statuses
class CalendarDayStatus(str, Enum):
    HOLIDAY = "Holiday"
    LEAVE = "Leave"
    LEAVE_PENDING = "Leave (Pending)"
    WEEKEND = "Weekend"
    ABSENT = "Absent"
