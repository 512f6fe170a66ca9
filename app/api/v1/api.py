from fastapi import APIRouter
from app.api.v1.endpoints.hr import attendance, calendar, holidays, leaves

api_router = APIRouter()

# HR routes
api_router.include_router(attendance.router, prefix="/hr/attendance", tags=["Human Resource"])
api_router.include_router(leaves.router, prefix="/hr/leave", tags=["Human Resource"])
api_router.include_router(calendar.router, prefix="/hr/calendar", tags=["Human Resource"])
api_router.include_router(holidays.router, prefix="/hr/holiday", tags=["Human Resource"])
