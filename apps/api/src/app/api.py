from fastapi import APIRouter

from app.modules.admissions import admin_router as admissions_admin_router
from app.modules.admissions import router as admissions_router
from app.modules.announcements import router as announcements_router
from app.modules.auth import router as auth_router
from app.modules.schedule import router as schedule_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(admissions_router, prefix="/applications", tags=["Applications"])

api_router.include_router(admissions_admin_router, prefix="/admin", tags=["Admin"])

api_router.include_router(announcements_router, prefix="/announcements", tags=["Announcements"])

api_router.include_router(schedule_router, prefix="/schedule", tags=["Schedule"])
