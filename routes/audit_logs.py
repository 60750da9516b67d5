from flask import Blueprint, jsonify, request
from models.audit_log import AuditLog
from security.rbac import require_action

audit_bp = Blueprint("audit", __name__)


@audit_bp.get("/audit-logs")
@require_action("view_audit_log")
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    q = AuditLog.query
    action = request.args.get("action")
    if action:
        q = q.filter(AuditLog.action == action.strip().upper())
    actor_id = request.args.get("actor_id", type=int)
    if actor_id is not None:
        q = q.filter(AuditLog.actor_id == actor_id)
    # e.g. ?entity=booking&entity_id=7 for the history of one booking
    entity = request.args.get("entity")
    if entity:
        q = q.filter(AuditLog.entity == entity.strip().lower())
        entity_id = request.args.get("entity_id", type=int)
        if entity_id is not None:
            q = q.filter(AuditLog.entity_id == entity_id)

    rows = q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([r.to_dict() for r in rows]), 200
