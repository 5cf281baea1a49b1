from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import get_db
from ..deps import get_leave_orchestrator
from ..services.leaves import LeaveOrchestrator

router = APIRouter(tags=["reminders"])
settings = get_settings()


@router.post("/internal/leave-reminders")
async def leave_reminder_tick(
    request: Request,
    db: Session = Depends(get_db),
    orchestrator: LeaveOrchestrator = Depends(get_leave_orchestrator),
):
    token = request.headers.get("x-reminder-token") or request.query_params.get("token")
    if settings.reminder_tick_token and token != settings.reminder_tick_token:
        return JSONResponse({"success": False, "message": "unauthorized"}, status_code=401)

    sent = orchestrator.send_due_reminders(db)
    return JSONResponse({"success": True, "sent": sent})
