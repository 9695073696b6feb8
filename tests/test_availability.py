import pytest
from roomportal.errors import InvalidInterval
from roomportal.models import Booking
from roomportal.extensions import db
from roomportal.services.availability import intervals_overlap, validate_interval
from conftest import at


def test_touching_intervals_do_not_overlap():
    assert not intervals_overlap(at(9), at(9, 30), at(9, 30), at(10))
    assert not intervals_overlap(at(9, 30), at(10), at(9), at(9, 30))


@pytest.mark.parametrize("b_start,b_end", [
    (at(9, 15), at(9, 45)),   # straddles the end
    (at(8, 45), at(9, 15)),   # straddles the start
    (at(9, 5), at(9, 10)),    # inside
    (at(8), at(11)),          # contains
    (at(9), at(9, 30)),       # identical
])
def test_overlapping_intervals(b_start, b_end):
    assert intervals_overlap(at(9), at(9, 30), b_start, b_end)
    assert intervals_overlap(b_start, b_end, at(9), at(9, 30))


def test_validate_interval_rejects_empty_and_reversed():
    with pytest.raises(InvalidInterval):
        validate_interval(at(10), at(10))
    with pytest.raises(InvalidInterval):
        validate_interval(at(11), at(10))
    with pytest.raises(InvalidInterval):
        validate_interval(None, at(10))


def test_check_reports_conflicts(service, init_data):
    alice, _, _, r1, _ = init_data
    a = service.create_booking(r1.id, alice.id, at(9), at(9, 30), 'Standup')

    verdict = service.checker.check(r1.id, at(9, 15), at(9, 45))
    assert not verdict.is_free
    assert [b.id for b in verdict.conflicts] == [a.id]

    assert service.checker.check(r1.id, at(9, 30), at(10)).is_free
    assert service.checker.check(r1.id, at(9), at(9, 30), exclude_booking_id=a.id).is_free


def test_check_ignores_cancelled_and_other_rooms(service, init_data):
    alice, _, _, r1, _ = init_data
    db.session.add_all([
        Booking(room_id=r1.id, owner_id=alice.id, start_time=at(9), end_time=at(10), is_cancelled=True),
        Booking(room_id=r1.id + 100, owner_id=alice.id, start_time=at(9), end_time=at(10)),
    ])
    db.session.commit()

    assert service.checker.check(r1.id, at(9), at(10)).is_free


def test_free_slots_fill_gaps(service, init_data):
    alice, _, _, r1, _ = init_data
    service.create_booking(r1.id, alice.id, at(7), at(9), 'Early')
    service.create_booking(r1.id, alice.id, at(10), at(11), 'Mid')
    service.create_booking(r1.id, alice.id, at(11), at(12), 'Back to back')

    slots = service.checker.free_slots(r1.id, at(8), at(19))
    assert slots == [(at(9), at(10)), (at(12), at(19))]


def test_free_slots_whole_window_when_empty(service, init_data):
    _, _, _, r1, _ = init_data
    assert service.checker.free_slots(r1.id, at(8), at(19)) == [(at(8), at(19))]
