from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from flask import current_app

from models import db
from models.booking import Booking
from models.slot import Slot
from security.rbac import ADMIN, USER, can
from services.common import commit_or_fail, iso, money, require
from services.slots import slot_status
from utils.audit import log_event
from utils.billing import billable_hours, compute_charge
from utils.booking_state import (
    ACTIVE_STATUSES,
    BOOKED,
    BOOKING_STATUSES,
    SLOT_AVAILABLE,
    next_status,
)
from utils.errors import InvalidInput, NotFound, StateConflict, StoreFailure
from utils.timeutil import utcnow


def serialize_booking(b: Booking) -> dict:
    s = b.slot
    return {
        "id": b.id,
        "user_id": b.user_id,
        "slot_id": b.slot_id,
        "status": b.status,
        "booked_at": iso(b.booked_at),
        "checked_in_at": iso(b.checked_in_at),
        "checked_out_at": iso(b.checked_out_at),
        "cancelled_at": iso(b.cancelled_at),
        "total_amount": money(b.total_amount),
        "slot": {
            "slot_number": s.slot_number if s else None,
            "zone": s.zone if s else None,
            "price_per_hour": money(s.price_per_hour) if s else None,
        },
    }


def _get_booking(booking_id: int) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    return booking


def get_active_booking(principal):
    return (
        Booking.query
        .filter(Booking.user_id == principal.user_id, Booking.status.in_(ACTIVE_STATUSES))
        .first()
    )


def list_bookings(principal, status=None) -> list:
    if status is not None and status not in BOOKING_STATUSES:
        raise InvalidInput(f"status must be one of: {', '.join(BOOKING_STATUSES)}")

    q = Booking.query
    if not can(principal.role, "view_all_bookings"):
        q = q.filter_by(user_id=principal.user_id)
    if status:
        q = q.filter_by(status=status)

    rows = q.order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    return [serialize_booking(b) for b in rows]


def create_booking(principal, slot_id: int, now=None) -> Booking:
    require(principal, "book")
    now = now or utcnow()

    slot = db.session.get(Slot, slot_id)
    if not slot:
        raise NotFound("Slot not found")

    if get_active_booking(principal) is not None:
        raise StateConflict("You already have an active booking. Cancel or complete it first.")
    if slot_status(slot.id) != SLOT_AVAILABLE:
        raise StateConflict("Slot is not available")

    booking = Booking(user_id=principal.user_id, slot_id=slot.id, status=BOOKED, booked_at=now)
    db.session.add(booking)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # one of the active-booking unique indexes fired: someone got there first
        log_event("BOOKING_FAIL_CONFLICT", principal, slot)
        raise StateConflict("Booking failed: the slot was just taken or you already have an active booking") from None
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Store failure while creating booking for slot %s", slot.id)
        raise StoreFailure(f"Could not create booking: {exc.__class__.__name__}") from exc

    log_event("BOOKING_CREATE", principal, booking, slot_id=slot.id)
    return booking


def _transition(booking: Booking, action: str, values: dict):
    """
    Moves a booking along one edge of the lifecycle with a single guarded UPDATE.
    The WHERE on the current status makes this a compare-and-set: if another
    session moved the booking first, nothing is written and we report a conflict.
    """
    current = booking.status
    values = dict(values, status=next_status(current, action))

    try:
        updated = (
            Booking.query
            .filter_by(id=booking.id, status=current)
            .update(values, synchronize_session=False)
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Store failure during %s of booking %s", action, booking.id)
        raise StoreFailure(f"Could not {action.replace('_', ' ')}: {exc.__class__.__name__}") from exc

    if updated != 1:
        db.session.rollback()
        raise StateConflict("Booking was changed by someone else. Reload and try again.")

    commit_or_fail(action.replace("_", " "))
    db.session.refresh(booking)


def check_in(principal, booking_id: int, now=None) -> Booking:
    require(principal, "check_in")
    now = now or utcnow()
    booking = _get_booking(booking_id)

    _transition(booking, "check_in", {"checked_in_at": max(now, booking.booked_at)})

    log_event("BOOKING_CHECK_IN", principal, booking)
    return booking


def check_out(principal, booking_id: int, now=None) -> Booking:
    require(principal, "check_out")
    now = now or utcnow()
    booking = _get_booking(booking_id)
    # reject early so we don't bill a booking that was never checked in
    next_status(booking.status, "check_out")

    checked_out_at = max(now, booking.checked_in_at)
    # rate is read at check-out time, not locked at booking time
    slot = db.session.get(Slot, booking.slot_id)
    total = compute_charge(booking.checked_in_at, checked_out_at, slot.price_per_hour)

    _transition(booking, "check_out", {"checked_out_at": checked_out_at, "total_amount": total})

    log_event(
        "BOOKING_CHECK_OUT",
        principal,
        booking,
        hours=billable_hours(booking.checked_in_at, checked_out_at),
        rate=money(slot.price_per_hour),
        total_amount=money(total),
    )
    return booking


def cancel(principal, booking_id: int, now=None) -> Booking:
    require(principal, "cancel")
    now = now or utcnow()
    booking = _get_booking(booking_id)

    # users may only cancel their own; admins may cancel anyone's
    if principal.role == USER and booking.user_id != principal.user_id:
        raise NotFound("Booking not found")

    _transition(booking, "cancel", {"cancelled_at": max(now, booking.booked_at)})

    log_event("ADMIN_BOOKING_CANCEL" if principal.role == ADMIN else "BOOKING_CANCEL", principal, booking)
    return booking
