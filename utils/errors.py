class ParkingError(Exception):
    """Base for errors that surface to the caller as an error notice."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(ParkingError):
    status_code = 400


class Forbidden(ParkingError):
    # caller's role lacks permission for the requested action
    status_code = 403


class NotFound(ParkingError):
    status_code = 404


class StateConflict(ParkingError):
    # booking/slot is not in the state the action expects
    status_code = 409


class StoreFailure(ParkingError):
    # the database read/write itself failed
    status_code = 503
