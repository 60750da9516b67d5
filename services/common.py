from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from security.rbac import can
from utils.errors import Forbidden, StoreFailure


def require(principal, action: str):
    if principal is None or not can(principal.role, action):
        raise Forbidden(f"Your role is not allowed to {action.replace('_', ' ')}")


def commit_or_fail(what: str):
    """Commit the session, turning any database error into StoreFailure."""
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Store failure while trying to %s", what)
        raise StoreFailure(f"Could not {what}: {exc.__class__.__name__}") from exc


def money(value):
    if value is None:
        return None
    return f"{Decimal(str(value)):.2f}"


def iso(dt):
    return dt.isoformat() if dt else None
