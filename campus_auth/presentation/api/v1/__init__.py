from fastapi import APIRouter

from campus_auth.presentation.api.v1 import admin_sessions, sessions

router = APIRouter()
router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
router.include_router(
    admin_sessions.router, prefix="/admin/sessions", tags=["admin"]
)
