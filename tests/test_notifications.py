from smartmess.models import Notification, User
from smartmess.services.notifications import (
    NotificationDispatcher,
    NotificationPayload,
    allowed_channels,
)

from .conftest import RecordingTransport


def test_allowed_channels_respects_preferences():
    user = User(notify_email=False, notify_push=True, notify_sms=False)

    assert allowed_channels(user, ["email", "push", "sms", "whatsapp", "push"]) == ["push"]


def test_send_to_mess_skips_inactive_and_other_messes(db, mess_setup, dispatcher, transports):
    result = dispatcher.send_to_mess(
        db,
        mess_setup["mess"].id,
        title="Menu change",
        message="Dinner starts at 8 today",
        type="announcement",
        channels=("push",),
    )

    assert result.success == 3
    assert result.failed == 0
    recipients = {user_id for user_id, _, _ in transports["push"].sent}
    assert recipients == {member.id for member in mess_setup["members"]}
    assert db.query(Notification).count() == 3


def test_one_failing_recipient_does_not_stop_the_rest(db, mess_setup):
    failing = mess_setup["members"][0].id
    dispatcher = NotificationDispatcher(
        transports={"push": RecordingTransport("push", fail_for={failing})},
        max_workers=3,
    )

    result = dispatcher.send_to_mess(
        db,
        mess_setup["mess"].id,
        title="Mess Leave Notification",
        message="Closed tomorrow",
        type="leave_notification",
        channels=("push",),
    )

    assert result.success == 2
    assert result.failed == 1
    assert result.failed_user_ids == [failing]
    # the in-app record exists even when delivery failed
    assert db.query(Notification).filter(Notification.user_id == failing).count() == 1


def test_sms_needs_a_phone_number(db, mess_setup):
    dispatcher = NotificationDispatcher(max_workers=1)
    with_phone, without_phone = mess_setup["members"][0], mess_setup["members"][2]

    assert dispatcher.send_notification(
        db,
        NotificationPayload(
            user_id=with_phone.id, title="Hi", message="Test", type="test", channels=("sms",)
        ),
    )
    assert not dispatcher.send_notification(
        db,
        NotificationPayload(
            user_id=without_phone.id, title="Hi", message="Test", type="test", channels=("sms",)
        ),
    )


def test_unknown_user_returns_false(db, dispatcher):
    payload = NotificationPayload(user_id=4242, title="Hi", message="Test", type="test", channels=("push",))

    assert dispatcher.send_notification(db, payload) is False


def test_recipient_with_every_channel_disabled_still_gets_in_app_record(db, mess_setup, dispatcher, transports):
    member = mess_setup["members"][2]
    member.notify_email = False
    member.notify_push = False
    db.commit()

    delivered = dispatcher.send_notification(
        db,
        NotificationPayload(
            user_id=member.id, title="Hi", message="Test", type="test", channels=("email", "push")
        ),
    )

    assert delivered is True
    assert transports["email"].sent == []
    record = db.query(Notification).filter(Notification.user_id == member.id).one()
    assert record.channels == []
