from .dashboard import dashboard_bp
from .auth import auth_bp
from .slots import slots_bp
from .booking import booking_bp
from .settings import settings_bp
from .users import users_bp
from .audit_logs import audit_bp
