from roomportal.extensions import db
from roomportal.services.ledger import BookingLedger
from roomportal.services.availability import AvailabilityChecker
from roomportal.services.booking_service import BookingService


def get_booking_service():
    """BookingService bound to the Session of the current app context."""
    ledger = BookingLedger(db.session())
    return BookingService(ledger, AvailabilityChecker(ledger))
