from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..exceptions import UserNotFound
from ..models import AdminAction, User
from .notifications import NotificationDispatcher, NotificationPayload

logger = logging.getLogger(__name__)

LEAVE_PATTERN_TITLE = "Leave Pattern Notice"
LEAVE_PATTERN_MESSAGE = (
    "We noticed you have been taking frequent leaves. Please contact the mess "
    "administration if you have any concerns."
)


def perform_user_action(
    db: Session,
    dispatcher: NotificationDispatcher,
    *,
    mess_id: int,
    actor_id: int,
    target_user_id: int,
    action: str,
    note: str | None = None,
) -> AdminAction:
    target = (
        db.query(User)
        .filter(User.id == target_user_id, User.mess_id == mess_id)
        .one_or_none()
    )
    if not target:
        raise UserNotFound()

    record = AdminAction(
        mess_id=mess_id,
        actor_id=actor_id,
        target_user_id=target.id,
        action=action,
        note=note,
    )
    db.add(record)
    db.commit()
    logger.info("Admin action: %s for user %s in mess %s", action, target.id, mess_id)

    if action == "notify":
        dispatcher.send_notification(
            db,
            NotificationPayload(
                user_id=target.id,
                title=LEAVE_PATTERN_TITLE,
                message=LEAVE_PATTERN_MESSAGE,
                type="admin_notice",
                channels=("email",),
            ),
        )
    elif action == "investigate":
        logger.info("User %s marked for investigation", target.id)
    elif action == "restrict":
        logger.info("Leave privileges restricted for user %s", target.id)
    return record
