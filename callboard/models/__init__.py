from .organization import Organization
from .user import User, ROLES
from .show import Show, new_sign_in_token
from .attendance import Attendance, STATUSES

__all__ = ["Organization", "User", "ROLES", "Show", "new_sign_in_token", "Attendance", "STATUSES"]
