from utils.errors import StateConflict

BOOKED = "booked"
CHECKED_IN = "checked_in"
COMPLETED = "completed"
CANCELLED = "cancelled"

BOOKING_STATUSES = (BOOKED, CHECKED_IN, COMPLETED, CANCELLED)
ACTIVE_STATUSES = (BOOKED, CHECKED_IN)
TERMINAL_STATUSES = (COMPLETED, CANCELLED)

SLOT_AVAILABLE = "available"
SLOT_BOOKED = "booked"
SLOT_OCCUPIED = "occupied"

SLOT_STATUSES = (SLOT_AVAILABLE, SLOT_BOOKED, SLOT_OCCUPIED)

# (current status, action) -> next status. Nothing else is a legal move.
TRANSITIONS = {
    (BOOKED, "check_in"): CHECKED_IN,
    (BOOKED, "cancel"): CANCELLED,
    (CHECKED_IN, "check_out"): COMPLETED,
}

_CONFLICT_MESSAGES = {
    "check_in": "Only booked bookings can be checked in",
    "check_out": "Only checked-in bookings can be checked out",
    "cancel": "Only booked bookings can be cancelled",
}


def is_active(status: str) -> bool:
    return status in ACTIVE_STATUSES


def can_transition(current: str, action: str) -> bool:
    return (current, action) in TRANSITIONS


def next_status(current: str, action: str) -> str:
    """
    Returns the status a booking moves to when `action` is applied,
    or raises StateConflict when the move isn't allowed from `current`.
    """
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        msg = _CONFLICT_MESSAGES.get(action, f"Unknown booking action: {action}")
        raise StateConflict(f"{msg} (booking is {current})") from None


def slot_status_for(active_booking_status):
    """
    A slot's status is a function of its active booking only:
    none -> available, booked -> booked, checked_in -> occupied.
    """
    if active_booking_status is None:
        return SLOT_AVAILABLE
    if active_booking_status == BOOKED:
        return SLOT_BOOKED
    if active_booking_status == CHECKED_IN:
        return SLOT_OCCUPIED
    # terminal bookings no longer hold the slot
    return SLOT_AVAILABLE
