"""Cookie sign-in for the three things the rest of the app asks of auth:
who is calling, with which role, and signing them out again.

The cookie carries a random token. The database keeps only an HMAC of it
keyed with SECRET_KEY, so rows copied out of the table cannot be replayed.
"""
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from flask import current_app, request

from models import db
from models.session import AuthSession
from utils.timeutil import utcnow


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, handed explicitly to every service call."""

    user_id: int
    email: str
    role: str
    session_id: Optional[int] = None


def cookie_name() -> str:
    return current_app.config.get("AUTH_COOKIE_NAME", "campus_parking_session")


def _digest(raw_token: str) -> str:
    key = current_app.config["SECRET_KEY"].encode("utf-8")
    return hmac.new(key, raw_token.encode("utf-8"), hashlib.sha256).hexdigest()


def _principal(sess: AuthSession) -> Principal:
    user = sess.user
    return Principal(user_id=user.id, email=user.email, role=user.role, session_id=sess.id)


def sign_in(user, now=None):
    """Start a fresh session for `user`, ending every session they already had.

    Returns (raw_token, principal, rotated_count). Only the caller sees the raw token.
    """
    now = now or utcnow()
    rotated = (
        AuthSession.query
        .filter(AuthSession.user_id == user.id, AuthSession.ended_at.is_(None))
        .update({"ended_at": now, "end_reason": "rotated"}, synchronize_session=False)
    )

    raw_token = secrets.token_urlsafe(32)
    lifetime = current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60)
    sess = AuthSession(
        user=user,
        token_digest=_digest(raw_token),
        issued_at=now,
        last_seen_at=now,
        expires_at=now + timedelta(seconds=lifetime),
    )
    db.session.add(sess)
    db.session.commit()
    return raw_token, _principal(sess), rotated


def resolve_principal(now=None) -> Optional[Principal]:
    """Identify the caller from the request cookie.

    A session found past its absolute lifetime or idle window is ended on the
    spot so it stays dead even if the clock or the config changes later.
    """
    raw_token = request.cookies.get(cookie_name())
    if not raw_token:
        return None

    sess = AuthSession.query.filter_by(token_digest=_digest(raw_token)).first()
    if sess is None or sess.ended_at is not None:
        return None

    now = now or utcnow()
    reason = sess.lapse_reason(now, current_app.config.get("IDLE_TIMEOUT_SECONDS", 30 * 60))
    if reason:
        sess.end(reason, now)
        db.session.commit()
        return None

    sess.last_seen_at = now
    db.session.commit()
    return _principal(sess)


def sign_out(principal: Principal, now=None) -> bool:
    """End the session the caller is using."""
    if principal.session_id is None:
        return False
    ended = (
        AuthSession.query
        .filter(AuthSession.id == principal.session_id, AuthSession.ended_at.is_(None))
        .update({"ended_at": now or utcnow(), "end_reason": "logout"}, synchronize_session=False)
    )
    db.session.commit()
    return ended == 1
