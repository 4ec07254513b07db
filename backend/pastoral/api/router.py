from fastapi import APIRouter

from pastoral.api.routes import (
    auth,
    calendar,
    care_notes,
    care_reminders,
    health,
    members,
    notices,
    websocket,
)


api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(members.router, prefix="/members", tags=["members"])
api_router.include_router(care_notes.router, prefix="", tags=["care-notes"])
api_router.include_router(care_reminders.router, prefix="", tags=["care-reminders"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["calendar"])
api_router.include_router(notices.router, prefix="/notices", tags=["notices"])
api_router.include_router(websocket.router, prefix="/ws", tags=["websocket"])
