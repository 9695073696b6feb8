import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from roomportal.errors import (
    BookingConflict,
    BookingError,
    NotFound,
    RoomUnavailable,
    StorageError,
)
from roomportal.models import Booking
from roomportal.services.availability import AvailabilityChecker, validate_interval
from roomportal.services.ledger import DEFAULT_ORDER, DEFAULT_SORT, SORT_FIELDS, STATUS_FILTERS
from roomportal.utils.pagination import normalize_page, pagination_meta

logger = logging.getLogger(__name__)


class BookingService:
    """Create, reschedule, cancel and delete bookings.

    Creates and updates run check-then-write inside one transaction that
    starts by locking the target room, so the no-overlap rule holds under
    concurrent callers. Any rejected mutation rolls back and leaves the ledger
    untouched.
    """

    def __init__(self, ledger, checker=None):
        self.ledger = ledger
        self.checker = checker or AvailabilityChecker(ledger)

    @contextmanager
    def _transaction(self):
        session = self.ledger.session
        try:
            yield session
            session.commit()
        except BookingError as e:
            session.rollback()
            logger.info("Booking mutation rejected (%s): %s", type(e).__name__, e.message)
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Booking transaction failed")
            raise StorageError() from e

    def create_booking(self, room_id, owner_id, start_time, end_time, title=None):
        validate_interval(start_time, end_time)

        self.ledger.begin_write()
        with self._transaction():
            if not self.ledger.lock_room(room_id):
                raise NotFound('Room not found')
            room = self.ledger.get_room(room_id, refresh=True)
            if not room.is_working:
                raise RoomUnavailable(f"Room '{room.name}' is not in working condition")
            if self.ledger.get_user(owner_id) is None:
                raise NotFound('User not found')

            availability = self.checker.check(room_id, start_time, end_time)
            if not availability.is_free:
                logger.warning("Rejected booking on room %s for [%s, %s): overlaps %s",
                               room_id, start_time, end_time,
                               [b.id for b in availability.conflicts])
                raise BookingConflict(availability.conflicts)

            booking = self.ledger.add(Booking(
                room_id=room_id,
                owner_id=owner_id,
                start_time=start_time,
                end_time=end_time,
                title=title,
                is_cancelled=False
            ))

        logger.info("Booking %s created on room %s for [%s, %s)", booking.id, room_id, start_time, end_time)
        return booking

    def update_booking(self, booking_id, start_time, end_time, title=None):
        """Move a booking and/or retitle it. A None title keeps the current one."""
        validate_interval(start_time, end_time)

        self.ledger.begin_write()
        with self._transaction():
            if not self.ledger.lock_room_of_booking(booking_id):
                booking = self.ledger.get(booking_id)
                if booking is None or booking.is_cancelled:
                    raise NotFound('Booking not found or already cancelled')
                raise NotFound('Room not found')

            booking = self.ledger.get(booking_id, refresh=True)
            availability = self.checker.check(
                booking.room_id, start_time, end_time, exclude_booking_id=booking.id
            )
            if not availability.is_free:
                logger.warning("Rejected update of booking %s to [%s, %s): overlaps %s",
                               booking_id, start_time, end_time,
                               [b.id for b in availability.conflicts])
                raise BookingConflict(availability.conflicts)

            # Cancellation takes no room lock, so guard on it again at write time.
            if not self.ledger.reschedule(booking_id, start_time, end_time, title):
                raise NotFound('Booking not found or already cancelled')

        logger.info("Booking %s moved to [%s, %s)", booking_id, start_time, end_time)
        return self.ledger.get(booking_id, refresh=True)

    def cancel_booking(self, booking_id):
        with self._transaction():
            if not self.ledger.mark_cancelled(booking_id):
                raise NotFound('Booking not found or already cancelled')
        logger.info("Booking %s cancelled", booking_id)

    def delete_booking(self, booking_id):
        with self._transaction():
            if not self.ledger.remove(booking_id):
                raise NotFound('Booking not found')
        logger.info("Booking %s deleted", booking_id)

    # --- reads ---

    def get_booking(self, booking_id):
        booking = self.ledger.get(booking_id)
        if booking is None:
            raise NotFound('Booking not found')
        return booking

    def check_availability(self, room_id, start_time, end_time, exclude_booking_id=None):
        if self.ledger.get_room(room_id) is None:
            raise NotFound('Room not found')
        return self.checker.check(room_id, start_time, end_time, exclude_booking_id)

    def list_bookings_for_room(self, room_id, start_time=None, end_time=None, include_cancelled=False):
        if self.ledger.get_room(room_id) is None:
            raise NotFound('Room not found')
        if start_time is not None and end_time is not None:
            validate_interval(start_time, end_time)
        return self.ledger.for_room(room_id, start_time, end_time, include_cancelled)

    def list_bookings_for_owner(self, owner_id, offset=0, limit=10, sort_by=DEFAULT_SORT,
                                sort_order=DEFAULT_ORDER, status='all', max_limit=100):
        """Returns ``(items, pagination)``.

        Unknown sort fields, orders and status filters fall back to their
        defaults (start_time, desc, all) rather than failing.
        """
        offset, limit = normalize_page(offset, limit, max_limit=max_limit)
        if sort_by not in SORT_FIELDS:
            sort_by = DEFAULT_SORT
        sort_order = 'asc' if str(sort_order).lower() == 'asc' else 'desc'
        if status not in STATUS_FILTERS:
            status = 'all'

        rows, total = self.ledger.owner_page(owner_id, offset, limit, sort_by, sort_order, status)
        items = []
        for booking, room_name, room_location, employee_name in rows:
            data = booking.to_dict()
            data['room_name'] = room_name
            data['room_location'] = room_location
            data['employee_name'] = employee_name
            items.append(data)
        return items, pagination_meta(total, offset, limit)
