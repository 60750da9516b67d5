from flask import Blueprint, jsonify, g

from services.dashboard import dashboard_summary
from utils.auth_context import login_required

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.get("/health")
def health():
    return jsonify(status="ok"), 200


@dashboard_bp.get("/dashboard")
@login_required
def dashboard():
    return jsonify(role=g.principal.role, **dashboard_summary(g.principal)), 200
