from flask import current_app

from models import db
from models.slot import Slot
from services.slots import parse_price
from utils.errors import InvalidInput


def seed_slots(zones=None, per_zone=None, price=None) -> int:
    """
    Creates slots A1..An, B1..Bn, ... for the configured zones.
    Slot numbers that already exist are left alone, so this is safe to re-run.
    """
    if zones is None:
        zones = current_app.config.get("SEED_ZONES", "ABC")
    if per_zone is None:
        per_zone = current_app.config.get("SEED_SLOTS_PER_ZONE", 8)
    if not zones or not (zones.isascii() and zones.isalpha()):
        raise InvalidInput("zones must be letters, e.g. ABC")
    if per_zone < 0:
        raise InvalidInput("per_zone must not be negative")
    price = parse_price(price if price is not None else current_app.config.get("DEFAULT_PRICE_PER_HOUR", "2.00"))

    existing = {s.slot_number for s in Slot.query.all()}
    created = 0
    for zone in zones.upper():
        for n in range(1, per_zone + 1):
            number = f"{zone}{n}"
            if number in existing:
                continue
            db.session.add(Slot(slot_number=number, zone=zone, price_per_hour=price))
            created += 1
    db.session.commit()
    return created
