"""Typed failures raised by the booking core.

Every class carries the HTTP status the API layer answers with, so routes can
let these propagate to the handler registered in ``create_app``.
"""


class BookingError(Exception):
    status_code = 500
    message = 'Booking operation failed'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'error': type(self).__name__, 'message': self.message}


class InvalidRequest(BookingError):
    """Missing or ill-typed input fields."""
    status_code = 400
    message = 'Invalid request'


class InvalidInterval(InvalidRequest):
    """start >= end, or one of them missing."""
    message = 'Start time must be before end time'


class Unauthorized(BookingError):
    status_code = 401
    message = 'Invalid or expired credentials'


class Forbidden(BookingError):
    status_code = 403
    message = 'Not allowed to modify this resource'


class NotFound(BookingError):
    status_code = 404
    message = 'Not found'


class BookingConflict(BookingError):
    status_code = 409
    message = 'Room is already booked for the selected time'

    def __init__(self, conflicts, message=None):
        super().__init__(message)
        self.conflicts = list(conflicts)
        # Snapshot now, the session is rolled back before this propagates.
        self.details = [b.to_dict() for b in self.conflicts]

    def to_dict(self):
        data = super().to_dict()
        data['conflicts'] = self.details
        return data


class RoomUnavailable(BookingError):
    status_code = 409
    message = 'Room is not available for booking'


class StorageError(BookingError):
    """Transient store failure. Nothing was committed, callers may retry."""
    status_code = 503
    message = 'Storage temporarily unavailable, please retry'
