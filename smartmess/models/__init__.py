from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .admin_action import AdminAction  # noqa: E402,F401
from .billing_adjustment import BillingAdjustment  # noqa: E402,F401
from .leave import MessLeave  # noqa: E402,F401
from .mess import Mess  # noqa: E402,F401
from .notification import Notification  # noqa: E402,F401
from .user import User  # noqa: E402,F401
