import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..constants import LEAVE_STATUSES, LEAVE_TYPES, ROLE_MESS_OWNER, normalize_role
from ..db import get_db
from ..deps import get_leave_orchestrator
from ..exceptions import Forbidden, InvalidRequest, SmartMessError, Unauthorized
from ..schemas.leave import LeaveCreate, LeaveRead
from ..services.analytics import build_owner_analytics
from ..services.leaves import LeaveOrchestrator, list_leaves

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mess/leaves", tags=["leaves"])


def _require_owner(request: Request) -> dict:
    user = request.session.get("user")
    if not user:
        raise Unauthorized()
    if normalize_role(user.get("role")) != ROLE_MESS_OWNER:
        raise Forbidden()
    return user


def _failure(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error:
        body["error"] = error
    return JSONResponse(body, status_code=status_code)


def _split(value: str | None) -> list[str] | None:
    if not value:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


def _checked(values: list[str] | None, allowed: tuple[str, ...], label: str) -> list[str] | None:
    unknown = [value for value in values or [] if value not in allowed]
    if unknown:
        raise InvalidRequest(f"Unknown {label}: {', '.join(unknown)}")
    return values


def _dump(leave) -> dict:
    return LeaveRead.from_leave(leave).model_dump(by_alias=True, mode="json")


@router.get("")
async def get_leaves(
    request: Request,
    status_filter: str | None = Query(default=None, alias="status"),
    leave_type: str | None = Query(default=None, alias="leaveType"),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
):
    owner = _require_owner(request)
    statuses = _checked(_split(status_filter), LEAVE_STATUSES, "status")
    leave_types = _checked(_split(leave_type), LEAVE_TYPES, "leave type")
    try:
        leaves = list_leaves(
            db,
            owner["id"],
            statuses=statuses,
            leave_types=leave_types,
            start_from=start_date,
            start_to=end_date,
        )
        data = [_dump(leave) for leave in leaves]
    except Exception as exc:
        logger.exception("Error fetching leaves")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch leaves", str(exc))
    return JSONResponse({"success": True, "data": data})


@router.post("", status_code=status.HTTP_201_CREATED)
async def schedule_leave(
    request: Request,
    payload: LeaveCreate,
    db: Session = Depends(get_db),
    orchestrator: LeaveOrchestrator = Depends(get_leave_orchestrator),
):
    owner = _require_owner(request)
    try:
        leave = orchestrator.create_leave(db, owner["id"], payload)
        data = _dump(leave)
    except SmartMessError as exc:
        return _failure(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("Error scheduling leave")
        db.rollback()
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to schedule leave", str(exc))
    return JSONResponse(
        {"success": True, "data": data, "message": "Leave scheduled successfully"},
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/analytics")
async def leave_analytics(request: Request, db: Session = Depends(get_db)):
    owner = _require_owner(request)
    try:
        analytics = build_owner_analytics(db, owner["id"])
    except SmartMessError as exc:
        return _failure(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("Error fetching analytics")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch analytics", str(exc))
    return JSONResponse({"success": True, "data": analytics.model_dump(by_alias=True, mode="json")})


@router.patch("/{leave_id}/cancel")
async def cancel_leave(
    request: Request,
    leave_id: int,
    db: Session = Depends(get_db),
    orchestrator: LeaveOrchestrator = Depends(get_leave_orchestrator),
):
    owner = _require_owner(request)
    try:
        leave = orchestrator.cancel_leave(db, leave_id, owner["id"])
        data = _dump(leave)
    except SmartMessError as exc:
        return _failure(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("Error cancelling leave %s", leave_id)
        db.rollback()
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to cancel leave", str(exc))
    return JSONResponse({"success": True, "data": data, "message": "Leave cancelled successfully"})


@router.post("/{leave_id}/notify")
async def notify_leave(
    request: Request,
    leave_id: int,
    db: Session = Depends(get_db),
    orchestrator: LeaveOrchestrator = Depends(get_leave_orchestrator),
):
    owner = _require_owner(request)
    try:
        orchestrator.notify_leave(db, leave_id, owner["id"])
    except SmartMessError as exc:
        return _failure(exc.status_code, exc.message)
    except Exception:
        logger.exception("Error sending notifications for leave %s", leave_id)
        db.rollback()
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send notifications")
    return JSONResponse({"success": True, "message": "Notifications sent successfully"})
