import json
from flask import request, has_request_context
from models import db
from models.audit_log import AuditLog


def log_event(action: str, actor=None, target=None, **details):
    """Append one row to the audit trail and commit it.

    `actor` is the Principal that acted (None when nobody is signed in).
    `target` is the Slot, Booking or User the action touched. Extra keyword
    arguments are kept as JSON details.
    """
    row = AuditLog(
        action=action,
        actor_id=actor.user_id if actor else None,
        # role at the time of the event; it can change afterwards
        actor_role=actor.role if actor else None,
        entity=type(target).__name__.lower() if target is not None else None,
        entity_id=target.id if target is not None else None,
        details=json.dumps(details, default=str, sort_keys=True) if details else None,
    )
    if has_request_context():
        row.ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    db.session.add(row)
    db.session.commit()
