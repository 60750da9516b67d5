from models.db import db
from utils.timeutil import utcnow

ACTIVE_STATUSES_SQL = "status IN ('booked', 'checked_in')"


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    slot_id = db.Column(db.Integer, db.ForeignKey("parking_slots.id"), nullable=False, index=True)

    status = db.Column(db.String(20), nullable=False, default="booked")
    # status values: booked, checked_in, completed, cancelled

    booked_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    checked_in_at = db.Column(db.DateTime, nullable=True)
    checked_out_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    total_amount = db.Column(db.Numeric(10, 2), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    slot = db.relationship("Slot", lazy="joined")
    user = db.relationship("User")

    __table_args__ = (
        # Hard business-rules, enforced by the store so concurrent sessions can't race them:
        # one active booking per user, and one active booking per slot.
        db.Index(
            "uq_bookings_active_user",
            "user_id",
            unique=True,
            sqlite_where=db.text(ACTIVE_STATUSES_SQL),
            postgresql_where=db.text(ACTIVE_STATUSES_SQL),
        ),
        db.Index(
            "uq_bookings_active_slot",
            "slot_id",
            unique=True,
            sqlite_where=db.text(ACTIVE_STATUSES_SQL),
            postgresql_where=db.text(ACTIVE_STATUSES_SQL),
        ),
    )
