from decimal import Decimal

from models import db
from models.booking import Booking
from security.rbac import can
from services.common import money
from services.slots import list_slots
from utils.booking_state import (
    ACTIVE_STATUSES,
    COMPLETED,
    SLOT_AVAILABLE,
    SLOT_BOOKED,
    SLOT_OCCUPIED,
)


def dashboard_summary(principal) -> dict:
    slots = list_slots()
    statuses = [s["status"] for s in slots]

    q = Booking.query
    if not can(principal.role, "view_all_bookings"):
        q = q.filter_by(user_id=principal.user_id)

    out = {
        "slots": {
            "total": len(slots),
            "available": statuses.count(SLOT_AVAILABLE),
            "booked": statuses.count(SLOT_BOOKED),
            "occupied": statuses.count(SLOT_OCCUPIED),
        },
        "bookings": {
            "active": q.filter(Booking.status.in_(ACTIVE_STATUSES)).count(),
            "completed": q.filter(Booking.status == COMPLETED).count(),
        },
    }

    if can(principal.role, "view_revenue"):
        revenue = (
            db.session.query(db.func.sum(Booking.total_amount))
            .filter(Booking.status == COMPLETED)
            .scalar()
        )
        out["revenue"] = money(Decimal(str(revenue or 0)))

    return out
