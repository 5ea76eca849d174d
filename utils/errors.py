class ParkingError(Exception):
    """
    Base class for every failure raised by the parking core.
    Routers map ``status_code`` to the HTTP response.
    """

    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class NotFound(ParkingError):
    status_code = 404


class SlotUnavailable(ParkingError):
    status_code = 409


class Unreachable(SlotUnavailable):
    """No path between the requested nodes."""


class InvalidTimeWindow(ParkingError):
    status_code = 422


class InvalidStatusUpdate(ParkingError):
    status_code = 400


class Unauthorized(ParkingError):
    status_code = 401


class PersistenceFailure(ParkingError):
    status_code = 503
