from flask import Blueprint, request, jsonify, g

from security.rbac import require_action
from services import bookings as booking_service
from utils.auth_context import login_required

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")


# ---------- USERS: book a slot (one active booking at a time) ----------
@booking_bp.post("")
@require_action("book")
def create_booking():
    data = request.get_json(silent=True) or {}
    slot_id = data.get("slot_id")
    if not isinstance(slot_id, int) or isinstance(slot_id, bool):
        return jsonify(error="slot_id (integer) required"), 400

    booking = booking_service.create_booking(g.principal, slot_id)
    return jsonify(
        message=f"Slot {booking.slot.slot_number} has been reserved",
        booking=booking_service.serialize_booking(booking),
    ), 201


# ---------- ALL: list bookings (users see their own) ----------
@booking_bp.get("")
@login_required
def list_bookings():
    status = request.args.get("status") or None
    return jsonify(booking_service.list_bookings(g.principal, status=status)), 200


@booking_bp.get("/active")
@login_required
def active_booking():
    booking = booking_service.get_active_booking(g.principal)
    return jsonify(booking=booking_service.serialize_booking(booking) if booking else None), 200


# ---------- STAFF/ADMIN: check in / check out ----------
@booking_bp.post("/<int:booking_id>/check-in")
@require_action("check_in")
def check_in(booking_id: int):
    booking = booking_service.check_in(g.principal, booking_id)
    return jsonify(message="Checked in successfully", booking=booking_service.serialize_booking(booking)), 200


@booking_bp.post("/<int:booking_id>/check-out")
@require_action("check_out")
def check_out(booking_id: int):
    booking = booking_service.check_out(g.principal, booking_id)
    return jsonify(message="Checked out. Billing calculated.", booking=booking_service.serialize_booking(booking)), 200


# ---------- USERS (own) / ADMIN (any): cancel ----------
@booking_bp.post("/<int:booking_id>/cancel")
@require_action("cancel")
def cancel_booking(booking_id: int):
    booking = booking_service.cancel(g.principal, booking_id)
    return jsonify(message="Booking cancelled", booking=booking_service.serialize_booking(booking)), 200
