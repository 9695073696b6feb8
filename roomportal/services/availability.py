from typing import NamedTuple

from roomportal.errors import InvalidInterval


def intervals_overlap(a_start, a_end, b_start, b_end):
    """True when half-open intervals [a_start, a_end) and [b_start, b_end) share an instant.

    Touching intervals (a_end == b_start) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def validate_interval(start_time, end_time):
    if start_time is None or end_time is None:
        raise InvalidInterval('Start and end time are required')
    if start_time >= end_time:
        raise InvalidInterval()


class Availability(NamedTuple):
    is_free: bool
    conflicts: list


class AvailabilityChecker:
    """Read-only verdicts on whether a room is free. No side effects."""

    def __init__(self, ledger):
        self.ledger = ledger

    def check(self, room_id, start_time, end_time, exclude_booking_id=None):
        validate_interval(start_time, end_time)
        conflicts = self.ledger.active_overlapping(
            room_id, start_time, end_time, exclude_booking_id=exclude_booking_id
        )
        return Availability(is_free=not conflicts, conflicts=conflicts)

    def free_slots(self, room_id, window_start, window_end):
        """Gaps between active bookings inside [window_start, window_end), in order."""
        validate_interval(window_start, window_end)
        slots = []
        cursor = window_start
        for booking in self.ledger.active_overlapping(room_id, window_start, window_end):
            if booking.start_time > cursor:
                slots.append((cursor, booking.start_time))
            cursor = max(cursor, booking.end_time)
        if cursor < window_end:
            slots.append((cursor, window_end))
        return slots
