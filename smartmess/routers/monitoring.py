import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..constants import ROLE_ADMIN, ROLE_MESS_OWNER, normalize_role
from ..db import get_db
from ..deps import get_dispatcher
from ..exceptions import Forbidden, InvalidRequest, SmartMessError, Unauthorized
from ..schemas.admin import UserActionRequest
from ..services.admin_actions import perform_user_action
from ..services.analytics import build_monitoring_report
from ..services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mess/leaves/admin", tags=["leave-monitoring"])


def _require_manager(request: Request) -> dict:
    user = request.session.get("user")
    if not user:
        raise Unauthorized()
    if normalize_role(user.get("role")) not in {ROLE_MESS_OWNER, ROLE_ADMIN}:
        raise Forbidden()
    if not user.get("mess_id"):
        raise InvalidRequest("Mess ID is required")
    return user


@router.get("/monitoring")
async def leave_monitoring(request: Request, db: Session = Depends(get_db)):
    user = _require_manager(request)
    try:
        report = build_monitoring_report(db, user["mess_id"])
    except Exception as exc:
        logger.exception("Error fetching leave monitoring for mess %s", user["mess_id"])
        return JSONResponse(
            {"success": False, "message": "Failed to fetch leave analytics", "error": str(exc)},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return JSONResponse(report.model_dump(by_alias=True, mode="json"))


@router.post("/user-action")
async def user_action(
    request: Request,
    payload: UserActionRequest,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    user = _require_manager(request)
    try:
        perform_user_action(
            db,
            dispatcher,
            mess_id=user["mess_id"],
            actor_id=user["id"],
            target_user_id=payload.user_id,
            action=payload.action,
            note=payload.note,
        )
    except SmartMessError as exc:
        return JSONResponse({"success": False, "message": exc.message}, status_code=exc.status_code)
    except Exception:
        logger.exception("Error performing user action")
        db.rollback()
        return JSONResponse(
            {"success": False, "message": "Failed to perform user action"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return JSONResponse(
        {"success": True, "message": f"Action {payload.action} completed for user {payload.user_id}"}
    )
