from fastapi import Depends, Request

from .config import get_settings
from .services.leaves import LeaveOrchestrator
from .services.notifications import NotificationDispatcher


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.notification_dispatcher


def get_leave_orchestrator(
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> LeaveOrchestrator:
    return LeaveOrchestrator(dispatcher, meal_cost=get_settings().average_meal_cost)
