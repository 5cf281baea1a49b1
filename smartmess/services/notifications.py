"""Multi-channel notification fan-out.

Each recipient gets one in-app ``Notification`` row plus a send on every
channel their preferences allow. Channel sends run on a bounded thread pool
and a failing send never affects the other recipients or the caller.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence

from sqlalchemy.orm import Session

from ..config import Settings
from ..models import Notification, User
from .mailer import render_notification_email, send_email
from .members import active_members

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recipient:
    user_id: int
    full_name: str | None
    email: str | None
    phone: str | None


@dataclass
class NotificationPayload:
    user_id: int
    title: str
    message: str
    type: str
    channels: Sequence[str]
    data: dict | None = None


@dataclass
class DispatchResult:
    success: int = 0
    failed: int = 0
    failed_user_ids: list[int] = field(default_factory=list)


ChannelTransport = Callable[[Recipient, NotificationPayload], bool]


def _email_transport(recipient: Recipient, payload: NotificationPayload) -> bool:
    if not recipient.email:
        logger.warning("User %s has no email address", recipient.user_id)
        return False
    body = render_notification_email(payload.title, payload.message, recipient.full_name)
    send_email(recipient.email, payload.title, body)
    return True


def _push_transport(recipient: Recipient, payload: NotificationPayload) -> bool:
    logger.info("Push notification to user %s: %s | %s", recipient.user_id, payload.title, payload.type)
    return True


def _sms_transport(recipient: Recipient, payload: NotificationPayload) -> bool:
    if not recipient.phone:
        logger.warning("User %s has no phone number", recipient.user_id)
        return False
    logger.info("SMS to %s: %s", recipient.phone, payload.message)
    return True


def _whatsapp_transport(recipient: Recipient, payload: NotificationPayload) -> bool:
    if not recipient.phone:
        logger.warning("User %s has no phone number for WhatsApp", recipient.user_id)
        return False
    logger.info("WhatsApp message to %s: %s", recipient.phone, payload.message)
    return True


DEFAULT_TRANSPORTS: dict[str, ChannelTransport] = {
    "email": _email_transport,
    "push": _push_transport,
    "sms": _sms_transport,
    "whatsapp": _whatsapp_transport,
}


def allowed_channels(user: User, channels: Sequence[str]) -> list[str]:
    preferences = {
        "email": user.notify_email,
        "push": user.notify_push,
        "sms": user.notify_sms,
        # WhatsApp follows the SMS preference
        "whatsapp": user.notify_sms,
    }
    allowed = []
    for channel in channels:
        if preferences.get(channel, True) is False:
            continue
        if channel not in allowed:
            allowed.append(channel)
    return allowed


def _recipient_for(user: User) -> Recipient:
    return Recipient(user_id=user.id, full_name=user.full_name, email=user.email, phone=user.phone)


class NotificationDispatcher:
    def __init__(
        self,
        transports: Mapping[str, ChannelTransport] | None = None,
        max_workers: int = 4,
    ):
        self.transports = dict(transports or DEFAULT_TRANSPORTS)
        self.max_workers = max(1, max_workers)

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationDispatcher":
        return cls(max_workers=settings.notification_concurrency)

    def send_notification(self, db: Session, payload: NotificationPayload) -> bool:
        """Deliver one payload to one user. Returns False instead of raising."""
        try:
            user = db.query(User).filter(User.id == payload.user_id).one_or_none()
            if not user:
                logger.error("User not found for notification: %s", payload.user_id)
                return False
            deliveries = self._prepare(db, [(user, payload)])
        except Exception:
            logger.exception("Error preparing notification for user %s", payload.user_id)
            db.rollback()
            return False
        return self._deliver(deliveries).success == 1

    def send_to_mess(
        self,
        db: Session,
        mess_id: int,
        *,
        title: str,
        message: str,
        type: str,
        channels: Sequence[str],
        data: dict | None = None,
    ) -> DispatchResult:
        try:
            members = active_members(db, mess_id)
            batch = [
                (
                    member,
                    NotificationPayload(
                        user_id=member.id,
                        title=title,
                        message=message,
                        type=type,
                        channels=tuple(channels),
                        data=data,
                    ),
                )
                for member in members
            ]
            deliveries = self._prepare(db, batch)
        except Exception:
            logger.exception("Error preparing notifications for mess %s", mess_id)
            db.rollback()
            return DispatchResult()
        result = self._deliver(deliveries)
        logger.info(
            "Notified mess %s: %s delivered, %s failed", mess_id, result.success, result.failed
        )
        return result

    def _prepare(
        self, db: Session, batch: list[tuple[User, NotificationPayload]]
    ) -> list[tuple[Recipient, NotificationPayload, list[str]]]:
        deliveries = []
        for user, payload in batch:
            channels = allowed_channels(user, payload.channels)
            db.add(
                Notification(
                    user_id=user.id,
                    title=payload.title,
                    message=payload.message,
                    type=payload.type,
                    channels=channels,
                    data=payload.data,
                )
            )
            deliveries.append((_recipient_for(user), payload, channels))
        db.commit()
        return deliveries

    def _deliver(self, deliveries: list[tuple[Recipient, NotificationPayload, list[str]]]) -> DispatchResult:
        result = DispatchResult()
        if not deliveries:
            return result
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            pending = []
            for recipient, payload, channels in deliveries:
                if not channels:
                    logger.info("No allowed notification channels for user %s", recipient.user_id)
                futures = [pool.submit(self._send_channel, channel, recipient, payload) for channel in channels]
                pending.append((recipient, futures))
            for recipient, futures in pending:
                outcomes = [future.result() for future in futures]
                if not outcomes or any(outcomes):
                    result.success += 1
                else:
                    result.failed += 1
                    result.failed_user_ids.append(recipient.user_id)
        return result

    def _send_channel(self, channel: str, recipient: Recipient, payload: NotificationPayload) -> bool:
        transport = self.transports.get(channel)
        if transport is None:
            logger.warning("Unknown notification channel: %s", channel)
            return False
        try:
            return bool(transport(recipient, payload))
        except Exception:
            logger.exception("Failed to send %s notification to user %s", channel, recipient.user_id)
            return False
