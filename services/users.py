from models import db
from models.user import User, UserRole
from security.rbac import ADMIN, ROLES, is_valid_role
from services.common import commit_or_fail, iso, require
from utils.audit import log_event
from utils.errors import InvalidInput, NotFound, StateConflict


def serialize_user(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "full_name": u.full_name,
        "role": u.role,
        "created_at": iso(u.created_at),
    }


def list_users(principal) -> list:
    require(principal, "manage_users")
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return [serialize_user(u) for u in users]


def _admin_count() -> int:
    return UserRole.query.filter_by(role=ADMIN).count()


def set_role(principal, user_id: int, new_role) -> User:
    require(principal, "manage_users")
    if not is_valid_role(new_role):
        raise InvalidInput(f"role must be one of: {', '.join(ROLES)}")

    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    old_role = user.role
    if old_role == ADMIN and new_role != ADMIN and _admin_count() <= 1:
        raise StateConflict("Cannot remove the last admin")

    if user.role_binding is None:
        user.role_binding = UserRole(role=new_role)
    else:
        user.role_binding.role = new_role
    commit_or_fail("update role")

    log_event("USER_ROLE_UPDATE", principal, user, old=old_role, new=new_role)
    return user
