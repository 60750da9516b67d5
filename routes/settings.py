from flask import Blueprint, request, jsonify, g

from security.rbac import require_action
from services import slots as slot_service

settings_bp = Blueprint("settings", __name__, url_prefix="/settings")


@settings_bp.get("/slots")
@require_action("manage_slots")
def list_slots():
    return jsonify(slot_service.list_slots()), 200


@settings_bp.post("/slots")
@require_action("manage_slots")
def add_slot():
    data = request.get_json(silent=True) or {}
    slot = slot_service.add_slot(
        g.principal,
        data.get("slot_number"),
        data.get("zone"),
        data.get("price_per_hour"),
    )
    return jsonify(message="Slot added", slot=slot), 201


@settings_bp.patch("/slots/<int:slot_id>/price")
@require_action("manage_slots")
def update_price(slot_id: int):
    data = request.get_json(silent=True) or {}
    slot = slot_service.update_price(g.principal, slot_id, data.get("price_per_hour"))
    return jsonify(message="Price updated", slot=slot), 200
