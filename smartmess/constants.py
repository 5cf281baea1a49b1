from typing import Literal, get_args

LeaveType = Literal["holiday", "maintenance", "personal", "emergency", "seasonal", "other"]
MealType = Literal["breakfast", "lunch", "dinner"]

LEAVE_TYPES = get_args(LeaveType)
MEAL_TYPES = get_args(MealType)
LEAVE_STATUSES = ("scheduled", "active", "completed", "cancelled")
ADJUSTMENT_STATUSES = ("pending", "applied", "reversed")

# statuses that still occupy the mess calendar
BLOCKING_LEAVE_STATUSES = ("scheduled", "active")

ROLE_USER = "USER"
ROLE_MESS_OWNER = "MESS_OWNER"
ROLE_ADMIN = "ADMIN"
USER_ROLES = (ROLE_USER, ROLE_MESS_OWNER, ROLE_ADMIN)

_ROLE_ALIASES = {
    "user": ROLE_USER,
    "mess-owner": ROLE_MESS_OWNER,
    "mess_owner": ROLE_MESS_OWNER,
    "messowner": ROLE_MESS_OWNER,
    "admin": ROLE_ADMIN,
}


def normalize_role(value: str | None) -> str | None:
    """Map any accepted role spelling onto its canonical value."""
    if not value:
        return None
    return _ROLE_ALIASES.get(value.strip().lower())
