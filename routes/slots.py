from flask import Blueprint, request, jsonify

from services import slots as slot_service
from utils.auth_context import login_required

slots_bp = Blueprint("slots", __name__, url_prefix="/slots")


@slots_bp.get("")
@login_required
def list_slots():
    zone = request.args.get("zone")
    return jsonify(slot_service.list_slots(zone=zone)), 200


@slots_bp.get("/zones")
@login_required
def list_zones():
    return jsonify(slot_service.zone_summary()), 200
