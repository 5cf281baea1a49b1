from datetime import date, datetime, timedelta

from smartmess.models import AdminAction, MessLeave, Notification
from smartmess.services.analytics import average_gap_days, build_monitoring_report, classify_risk

from .conftest import login

MONITORING_URL = "/api/mess/leaves/admin/monitoring"
ACTION_URL = "/api/mess/leaves/admin/user-action"


def _add_leaves(db, setup, count, gap_days, now):
    for index in range(count):
        start = date(2025, 1, 1) + timedelta(days=index * 10)
        db.add(
            MessLeave(
                mess_id=setup["mess"].id,
                start_date=start,
                end_date=start + timedelta(days=1),
                leave_type="personal",
                meal_types=["lunch"],
                created_by=setup["owner"].id,
                created_at=now - timedelta(days=gap_days * index),
            )
        )
    db.commit()


def test_classify_risk_thresholds():
    assert classify_risk(8, 30) == "high"
    assert classify_risk(3, 6.5) == "high"
    assert classify_risk(5, 30) == "medium"
    assert classify_risk(3, 10) == "medium"
    assert classify_risk(3, 20) == "low"


def test_average_gap_days():
    start = datetime(2025, 1, 1)
    stamps = [start + timedelta(days=offset) for offset in (10, 0, 5)]
    assert average_gap_days(stamps) == 5
    assert average_gap_days([start]) == 0


def test_frequent_creator_is_high_risk(db, mess_setup):
    now = datetime(2025, 6, 1, 12, 0)
    _add_leaves(db, mess_setup, 9, 5, now)

    report = build_monitoring_report(db, mess_setup["mess"].id, now=now)

    assert len(report.frequent_leave_users) == 1
    profile = report.frequent_leave_users[0]
    assert profile.user_id == mess_setup["owner"].id
    assert profile.user_name == "Ravi Kumar"
    assert profile.leave_count == 9
    assert profile.total_leave_days == 18
    assert profile.average_days_between_leaves == 5
    assert profile.risk_level == "high"
    assert [alert.user_id for alert in report.alerts] == [mess_setup["owner"].id]
    assert report.total_users == 1
    assert report.average_leave_frequency == 9


def test_old_leaves_fall_outside_window(db, mess_setup):
    now = datetime(2025, 6, 1, 12, 0)
    _add_leaves(db, mess_setup, 4, 40, now)

    report = build_monitoring_report(db, mess_setup["mess"].id, now=now)

    # only the three created within the last three months remain
    assert report.frequent_leave_users[0].leave_count == 3
    assert report.frequent_leave_users[0].risk_level == "low"
    assert report.alerts == []


def test_monitoring_endpoint(owner_client, db, mess_setup):
    _add_leaves(db, mess_setup, 9, 5, datetime.utcnow())

    response = owner_client.get(MONITORING_URL)

    assert response.status_code == 200
    body = response.json()
    assert body["frequentLeaveUsers"][0]["riskLevel"] == "high"
    assert body["alerts"][0]["userId"] == mess_setup["owner"].id
    assert body["riskThresholds"] == {"high": 8, "medium": 5}


def test_monitoring_forbidden_for_members(client, mess_setup):
    login(client, mess_setup["members"][0].email)

    response = client.get(MONITORING_URL)

    assert response.status_code == 403


def test_notify_action_records_and_notifies(owner_client, db, mess_setup, transports):
    target = mess_setup["members"][0]

    response = owner_client.post(ACTION_URL, json={"userId": target.id, "action": "notify"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": f"Action notify completed for user {target.id}"}
    record = db.query(AdminAction).one()
    assert record.action == "notify"
    assert record.actor_id == mess_setup["owner"].id
    assert db.query(Notification).filter(Notification.user_id == target.id).count() == 1
    assert [user_id for user_id, _, _ in transports["email"].sent] == [target.id]


def test_restrict_action_unknown_user(owner_client):
    response = owner_client.post(ACTION_URL, json={"userId": 9999, "action": "restrict"})

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_unknown_action_is_invalid(owner_client, mess_setup):
    response = owner_client.post(
        ACTION_URL, json={"userId": mess_setup["members"][0].id, "action": "ban"}
    )

    assert response.status_code == 400


def test_action_on_member_of_another_mess_is_not_found(owner_client, db, mess_setup, transports):
    outsider = mess_setup["outsider"]

    response = owner_client.post(ACTION_URL, json={"userId": outsider.id, "action": "notify"})

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"
    assert db.query(AdminAction).count() == 0
    assert transports["email"].sent == []
