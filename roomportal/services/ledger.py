from sqlalchemy import event, select, update, delete, func
from sqlalchemy.orm import Session

from roomportal.models import Booking, Room, User
from roomportal.utils.dates import utcnow

FLUSHED_KEY = 'roomportal.flushed_writes'


@event.listens_for(Session, 'after_flush')
def _remember_flush(session, flush_context):
    session.info[FLUSHED_KEY] = True


@event.listens_for(Session, 'after_transaction_end')
def _forget_flush(session, transaction):
    if transaction.parent is None:
        session.info.pop(FLUSHED_KEY, None)


# Caller-facing sort keys and the columns they map to. Anything else falls
# back to DEFAULT_SORT.
SORT_FIELDS = {
    'start_time': Booking.start_time,
    'end_time': Booking.end_time,
    'created_at': Booking.created_at,
    'room_name': Room.name,
    'employee_name': User.name,
}
DEFAULT_SORT = 'start_time'
DEFAULT_ORDER = 'desc'

STATUS_FILTERS = ('all', 'active', 'cancelled', 'upcoming', 'past')


class BookingLedger:
    """Storage contract for bookings, backed by a SQLAlchemy session.

    BookingService is the only writer. The room lock helpers must be the
    first statement of a write transaction: they bump ``rooms.booking_version``
    which holds the row lock (or the SQLite write lock) until commit, so two
    writers on the same room cannot both pass the overlap check.
    """

    def __init__(self, session):
        self.session = session

    # --- lookups ---

    def get(self, booking_id, refresh=False):
        return self.session.get(Booking, booking_id, populate_existing=refresh)

    def get_room(self, room_id, refresh=False):
        return self.session.get(Room, room_id, populate_existing=refresh)

    def get_user(self, user_id):
        return self.session.get(User, user_id)

    # --- write transaction helpers ---

    def has_pending_changes(self):
        """Unflushed edits, or writes flushed into the open transaction."""
        session = self.session
        return bool(session.new or session.deleted
                    or session.info.get(FLUSHED_KEY)
                    or any(session.is_modified(obj) for obj in session.dirty))

    def begin_write(self):
        """Close any read transaction so the room lock starts a fresh one.

        Refuses to run over caller edits, flushed or not: they would either
        be committed alongside the booking or lost on rollback.
        """
        if self.has_pending_changes():
            raise RuntimeError('Booking writes need a session without pending changes')
        if self.session.in_transaction():
            self.session.rollback()

    def lock_room(self, room_id):
        stmt = (
            update(Room)
            .where(Room.id == room_id)
            .values(booking_version=Room.booking_version + 1, updated_at=Room.updated_at)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def lock_room_of_booking(self, booking_id):
        """Lock the room an active booking belongs to. False if there is none."""
        room_id = (
            select(Booking.room_id)
            .where(Booking.id == booking_id, Booking.is_cancelled == False)  # noqa: E712
            .scalar_subquery()
        )
        stmt = (
            update(Room)
            .where(Room.id == room_id)
            .values(booking_version=Room.booking_version + 1, updated_at=Room.updated_at)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def add(self, booking):
        self.session.add(booking)
        self.session.flush()
        return booking

    def reschedule(self, booking_id, start_time, end_time, title):
        values = {'start_time': start_time, 'end_time': end_time, 'updated_at': utcnow()}
        if title is not None:
            values['title'] = title
        stmt = (
            update(Booking)
            .where(Booking.id == booking_id, Booking.is_cancelled == False)  # noqa: E712
            .values(**values)
        )
        return self.session.execute(stmt).rowcount == 1

    def mark_cancelled(self, booking_id):
        stmt = (
            update(Booking)
            .where(Booking.id == booking_id, Booking.is_cancelled == False)  # noqa: E712
            .values(is_cancelled=True, updated_at=utcnow())
        )
        return self.session.execute(stmt).rowcount == 1

    def remove(self, booking_id):
        stmt = delete(Booking).where(Booking.id == booking_id)
        return self.session.execute(stmt).rowcount == 1

    # --- reads ---

    def active_overlapping(self, room_id, start_time, end_time, exclude_booking_id=None):
        """Non-cancelled bookings on the room sharing any instant with [start, end)."""
        stmt = select(Booking).where(
            Booking.room_id == room_id,
            Booking.is_cancelled == False,  # noqa: E712
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)
        return list(self.session.scalars(stmt.order_by(Booking.start_time, Booking.id)))

    def for_room(self, room_id, start_time=None, end_time=None, include_cancelled=False):
        stmt = select(Booking).where(Booking.room_id == room_id)
        if not include_cancelled:
            stmt = stmt.where(Booking.is_cancelled == False)  # noqa: E712
        if end_time is not None:
            stmt = stmt.where(Booking.start_time < end_time)
        if start_time is not None:
            stmt = stmt.where(Booking.end_time > start_time)
        return list(self.session.scalars(stmt.order_by(Booking.start_time, Booking.id)))

    def owner_page(self, owner_id, offset, limit, sort_by=DEFAULT_SORT, sort_order=DEFAULT_ORDER,
                   status='all', now=None):
        """One page of an owner's bookings plus the total matching count.

        Rows are ``(Booking, room_name, room_location, employee_name)``; the
        joined names are None once the room or user has been deleted.
        """
        conditions = [Booking.owner_id == owner_id]
        now = now or utcnow()
        if status == 'active':
            conditions.append(Booking.is_cancelled == False)  # noqa: E712
        elif status == 'cancelled':
            conditions.append(Booking.is_cancelled == True)  # noqa: E712
        elif status == 'upcoming':
            conditions += [Booking.is_cancelled == False, Booking.end_time > now]  # noqa: E712
        elif status == 'past':
            conditions.append(Booking.end_time <= now)

        total = self.session.scalar(select(func.count(Booking.id)).where(*conditions))

        column = SORT_FIELDS.get(sort_by, SORT_FIELDS[DEFAULT_SORT])
        if sort_order == 'asc':
            ordering = (column.asc(), Booking.id.asc())
        else:
            ordering = (column.desc(), Booking.id.desc())

        stmt = (
            select(Booking, Room.name, Room.location, User.name)
            .outerjoin(Room, Room.id == Booking.room_id)
            .outerjoin(User, User.id == Booking.owner_id)
            .where(*conditions)
            .order_by(*ordering)
            .offset(offset)
            .limit(limit)
        )
        return self.session.execute(stmt).all(), total
