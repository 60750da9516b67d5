import json

from models.db import db
from utils.timeutil import utcnow


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    action = db.Column(db.String(80), nullable=False, index=True)

    # who did it; both empty for anonymous events such as a failed login
    actor_id = db.Column(db.Integer, nullable=True, index=True)
    actor_role = db.Column(db.String(20), nullable=True)

    # what it was done to: slot, booking or user
    entity = db.Column(db.String(20), nullable=True)
    entity_id = db.Column(db.Integer, nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    details = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "action": self.action,
            "actor_id": self.actor_id,
            "actor_role": self.actor_role,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "ip": self.ip,
            "details": json.loads(self.details) if self.details else None,
        }
