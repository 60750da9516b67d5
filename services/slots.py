from decimal import Decimal, InvalidOperation

from models import db
from models.booking import Booking
from models.slot import Slot
from services.common import commit_or_fail, money, require
from utils.audit import log_event
from utils.booking_state import ACTIVE_STATUSES, SLOT_AVAILABLE, slot_status_for
from utils.errors import InvalidInput, NotFound

MAX_SLOT_NUMBER_LEN = 10
# largest value a Numeric(10, 2) column holds
MAX_PRICE = Decimal("99999999.99")


def parse_price(value) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidInput("price_per_hour is required")
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidInput("price_per_hour must be a number") from None
    if not price.is_finite() or price < 0:
        raise InvalidInput("price_per_hour must be a non-negative number")
    if price > MAX_PRICE:
        raise InvalidInput(f"price_per_hour must be at most {MAX_PRICE}")
    try:
        return price.quantize(Decimal("0.01"))
    except InvalidOperation:
        raise InvalidInput("price_per_hour must be a number") from None


def active_status_by_slot(slot_ids=None) -> dict:
    """slot_id -> status of the booking currently holding it."""
    q = Booking.query.filter(Booking.status.in_(ACTIVE_STATUSES))
    if slot_ids is not None:
        if not slot_ids:
            return {}
        q = q.filter(Booking.slot_id.in_(slot_ids))
    return {b.slot_id: b.status for b in q.all()}


def slot_status(slot_id: int) -> str:
    return slot_status_for(active_status_by_slot([slot_id]).get(slot_id))


def serialize_slot(slot: Slot, status: str) -> dict:
    return {
        "id": slot.id,
        "slot_number": slot.slot_number,
        "zone": slot.zone,
        "price_per_hour": money(slot.price_per_hour),
        "status": status,
    }


def list_slots(zone=None) -> list:
    q = Slot.query
    if zone:
        q = q.filter_by(zone=zone.strip().upper())
    slots = q.order_by(Slot.slot_number.asc(), Slot.id.asc()).all()

    held = active_status_by_slot([s.id for s in slots])
    return [serialize_slot(s, slot_status_for(held.get(s.id))) for s in slots]


def zone_summary() -> list:
    zones = {}
    for row in list_slots():
        z = zones.setdefault(row["zone"], {
            "zone": row["zone"],
            "total": 0,
            "available": 0,
            # rate shown for a zone is its first slot's rate
            "price_per_hour": row["price_per_hour"],
        })
        z["total"] += 1
        if row["status"] == SLOT_AVAILABLE:
            z["available"] += 1
    return [zones[k] for k in sorted(zones)]


def add_slot(principal, slot_number, zone, price_per_hour) -> dict:
    require(principal, "manage_slots")

    slot_number = (slot_number or "").strip() if isinstance(slot_number, str) else ""
    zone = (zone or "").strip().upper() if isinstance(zone, str) else ""
    if not slot_number or len(slot_number) > MAX_SLOT_NUMBER_LEN:
        raise InvalidInput(f"slot_number must be 1-{MAX_SLOT_NUMBER_LEN} characters")
    if len(zone) != 1 or not (zone.isascii() and zone.isalpha()):
        raise InvalidInput("zone must be a single letter")
    price = parse_price(price_per_hour)

    # duplicate slot numbers are allowed
    slot = Slot(slot_number=slot_number, zone=zone, price_per_hour=price)
    db.session.add(slot)
    commit_or_fail("add slot")

    log_event("SLOT_CREATE", principal, slot, slot_number=slot_number, zone=zone, price_per_hour=str(price))
    return serialize_slot(slot, SLOT_AVAILABLE)


def update_price(principal, slot_id: int, price_per_hour) -> dict:
    require(principal, "manage_slots")
    price = parse_price(price_per_hour)

    slot = db.session.get(Slot, slot_id)
    if not slot:
        raise NotFound("Slot not found")

    old_price = money(slot.price_per_hour)
    # already-billed bookings keep their total_amount; only future check-outs see this
    slot.price_per_hour = price
    commit_or_fail("update price")

    log_event("SLOT_PRICE_UPDATE", principal, slot, old=old_price, new=str(price))
    return serialize_slot(slot, slot_status(slot.id))
