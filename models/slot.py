from models.db import db
from utils.timeutil import utcnow


class Slot(db.Model):
    __tablename__ = "parking_slots"

    id = db.Column(db.Integer, primary_key=True)

    slot_number = db.Column(db.String(10), nullable=False, index=True)  # e.g. "A1"
    zone = db.Column(db.String(1), nullable=False, index=True)
    price_per_hour = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # No status column: availability is read off the slot's active booking
    # (see utils.booking_state.slot_status_for).
