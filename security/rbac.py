from functools import wraps
from flask import g, jsonify

USER = "user"
PARKING_STAFF = "parking_staff"
ADMIN = "admin"

ROLES = (USER, PARKING_STAFF, ADMIN)

# action -> roles allowed to perform it
POLICY = {
    "book": {USER},
    "cancel": {USER, ADMIN},
    "check_in": {PARKING_STAFF, ADMIN},
    "check_out": {PARKING_STAFF, ADMIN},
    "view_all_bookings": {PARKING_STAFF, ADMIN},
    "manage_slots": {ADMIN},
    "manage_users": {ADMIN},
    "view_revenue": {ADMIN},
    "view_audit_log": {ADMIN},
}


def can(role: str, action: str) -> bool:
    return role in POLICY.get(action, ())


def is_valid_role(role) -> bool:
    return isinstance(role, str) and role in ROLES


def require_action(action: str):
    """
    Usage: @require_action("check_in")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal = getattr(g, "principal", None)
            if principal is None:
                return jsonify(error="Authentication required"), 401

            if not can(principal.role, action):
                return jsonify(error="Forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
