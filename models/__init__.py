from .db import db
from .user import User, UserRole
from .audit_log import AuditLog
from .session import AuthSession
from .slot import Slot
from .booking import Booking
