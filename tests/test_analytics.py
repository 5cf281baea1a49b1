from datetime import date

from smartmess.models import MessLeave
from smartmess.services.analytics import build_owner_analytics
from smartmess.services.dates import days_in_year

LEAVES_URL = "/api/mess/leaves"


def test_march_leave_counts_in_year_totals(owner_client):
    year = date.today().year
    owner_client.post(
        LEAVES_URL,
        json={
            "startDate": f"{year}-03-10",
            "endDate": f"{year}-03-14",
            "leaveType": "maintenance",
            "mealTypes": ["dinner"],
        },
    )

    response = owner_client.get(f"{LEAVES_URL}/analytics")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalLeaveDays"] == 5
    assert data["totalServingDays"] == days_in_year(year) - 5
    assert len(data["monthlyBreakdown"]) == 12
    assert data["monthlyBreakdown"][2]["month"] == "March"
    assert data["monthlyBreakdown"][2]["leaveDays"] == 5
    assert data["monthlyBreakdown"][2]["servingDays"] == 26
    assert data["leavesByType"]["maintenance"] == 1
    assert data["leavesByType"]["holiday"] == 0


def test_cancelled_and_other_years_are_ignored(db, mess_setup):
    mess, owner = mess_setup["mess"], mess_setup["owner"]
    db.add_all(
        [
            MessLeave(
                mess_id=mess.id,
                start_date=date(2025, 4, 1),
                end_date=date(2025, 4, 2),
                leave_type="holiday",
                meal_types=["lunch"],
                status="cancelled",
                created_by=owner.id,
            ),
            MessLeave(
                mess_id=mess.id,
                start_date=date(2024, 12, 30),
                end_date=date(2025, 1, 2),
                leave_type="holiday",
                meal_types=["lunch"],
                created_by=owner.id,
            ),
        ]
    )
    db.commit()

    analytics = build_owner_analytics(db, owner.id, today=date(2025, 1, 1))

    assert analytics.total_leave_days == 0
    assert analytics.total_serving_days == 365


def test_upcoming_and_recurring_patterns(db, mess_setup):
    mess, owner = mess_setup["mess"], mess_setup["owner"]
    for month in (2, 3, 4, 5, 6, 7):
        db.add(
            MessLeave(
                mess_id=mess.id,
                start_date=date(2025, month, 1),
                end_date=date(2025, month, 1),
                leave_type="maintenance",
                meal_types=["breakfast"],
                is_recurring=True,
                recurring_pattern={"frequency": "monthly", "interval": 1},
                created_by=owner.id,
            )
        )
    db.commit()

    analytics = build_owner_analytics(db, owner.id, today=date(2025, 1, 15))

    assert [leave.start_date.month for leave in analytics.upcoming_leaves] == [2, 3, 4, 5, 6]
    assert analytics.upcoming_leaves[0].effective_status == "scheduled"
    assert len(analytics.frequent_leave_patterns) == 1
    pattern = analytics.frequent_leave_patterns[0]
    assert pattern.pattern == "Monthly maintenance"
    assert pattern.count == 6
    assert pattern.last_occurrence == date(2025, 7, 1)
