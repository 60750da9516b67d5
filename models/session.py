from datetime import timedelta

from models.db import db
from utils.timeutil import utcnow


class AuthSession(db.Model):
    """One signed-in browser. The cookie holds the raw token, this row only its digest."""

    __tablename__ = "auth_sessions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    token_digest = db.Column(db.String(64), unique=True, nullable=False, index=True)

    issued_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    last_seen_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)

    # set once; a session never comes back after it ends
    ended_at = db.Column(db.DateTime, nullable=True)
    end_reason = db.Column(db.String(20), nullable=True)  # logout, rotated, expired, idle

    user = db.relationship("User", lazy="joined")

    def lapse_reason(self, now, idle_seconds: int):
        """Why the session can no longer be used at `now`, or None if it still can."""
        if self.ended_at is not None:
            return self.end_reason
        if self.expires_at <= now:
            return "expired"
        if self.last_seen_at + timedelta(seconds=idle_seconds) <= now:
            return "idle"
        return None

    def end(self, reason: str, now=None):
        self.ended_at = now or utcnow()
        self.end_reason = reason
