import pytest
from datetime import timedelta
from roomportal.errors import InvalidInterval, NotFound
from roomportal.extensions import db
from roomportal.models import Room, User
from roomportal.utils.pagination import normalize_page
from conftest import at


@pytest.fixture
def history(service, init_data):
    alice, bob, _, r1, _ = init_data
    annex = Room(name='Annex', capacity=3, location='Basement')
    db.session.add(annex)
    db.session.commit()

    ids = []
    for i in range(7):
        room_id = r1.id if i % 2 == 0 else annex.id
        start = at(9) + timedelta(hours=i)
        ids.append(service.create_booking(room_id, alice.id, start, start + timedelta(minutes=30), f'A{i}').id)
    service.create_booking(r1.id, bob.id, at(8), at(8, 30), 'Bob only')
    return alice, bob, r1, annex, ids


def test_total_independent_of_page(service, history):
    alice, _, _, _, _ = history
    for offset, limit in [(0, 3), (3, 3), (6, 3), (0, 100), (10, 5)]:
        items, page = service.list_bookings_for_owner(alice.id, offset=offset, limit=limit)
        assert page['total'] == 7
        assert page['hasMore'] == (offset + limit < 7)
        assert len(items) == max(0, min(limit, 7 - offset))


def test_pages_do_not_overlap(service, history):
    alice, _, _, _, ids = history
    seen = []
    offset = 0
    while True:
        items, page = service.list_bookings_for_owner(alice.id, offset=offset, limit=3, sort_by='created_at')
        seen += [b['id'] for b in items]
        if not page['hasMore']:
            break
        offset += 3
    assert sorted(seen) == sorted(ids)


def test_default_sort_is_start_time_desc(service, history):
    alice, _, _, _, _ = history
    items, _ = service.list_bookings_for_owner(alice.id, limit=100)
    starts = [b['start_time'] for b in items]
    assert starts == sorted(starts, reverse=True)


def test_unknown_sort_field_falls_back(service, history):
    alice, _, _, _, _ = history
    default, _ = service.list_bookings_for_owner(alice.id, limit=100)
    hostile, _ = service.list_bookings_for_owner(
        alice.id, limit=100, sort_by='start_time; DROP TABLE bookings', sort_order='sideways')
    assert [b['id'] for b in hostile] == [b['id'] for b in default]


def test_sort_by_room_name_joins_rooms(service, history):
    alice, _, _, _, _ = history
    items, _ = service.list_bookings_for_owner(alice.id, limit=100, sort_by='room_name', sort_order='asc')
    names = [b['room_name'] for b in items]
    assert names == sorted(names)
    assert names[0] == 'Annex'
    assert items[0]['room_location'] == 'Basement'
    assert items[0]['employee_name'] == 'Alice'


def test_status_filters(service, history):
    alice, _, _, _, ids = history
    service.cancel_booking(ids[0])
    service.cancel_booking(ids[1])

    _, active = service.list_bookings_for_owner(alice.id, status='active')
    _, cancelled = service.list_bookings_for_owner(alice.id, status='cancelled')
    _, everything = service.list_bookings_for_owner(alice.id, status='bogus')
    assert (active['total'], cancelled['total'], everything['total']) == (5, 2, 7)


def test_listing_survives_deleted_room_and_user(service, history):
    alice, _, _, annex, _ = history
    db.session.delete(db.session.get(Room, annex.id))
    db.session.delete(db.session.get(User, alice.id))
    db.session.commit()

    items, page = service.list_bookings_for_owner(alice.id, limit=100)
    assert page['total'] == 7
    assert all(b['employee_name'] is None for b in items)
    assert sum(1 for b in items if b['room_name'] is None) == 3


def test_room_listing_window(service, history):
    _, _, r1, _, _ = history
    all_active = service.list_bookings_for_room(r1.id)
    assert [b.title for b in all_active] == ['Bob only', 'A0', 'A2', 'A4', 'A6']

    window = service.list_bookings_for_room(r1.id, at(10), at(13, 15))
    assert [b.title for b in window] == ['A2', 'A4']


def test_room_listing_cancelled_flag(service, history):
    _, _, r1, _, ids = history
    service.cancel_booking(ids[0])
    assert 'A0' not in [b.title for b in service.list_bookings_for_room(r1.id)]
    assert 'A0' in [b.title for b in service.list_bookings_for_room(r1.id, include_cancelled=True)]


def test_room_listing_errors(service, history):
    _, _, r1, _, _ = history
    with pytest.raises(NotFound):
        service.list_bookings_for_room(9999)
    with pytest.raises(InvalidInterval):
        service.list_bookings_for_room(r1.id, at(12), at(11))


@pytest.mark.parametrize("offset,limit,expected", [
    (0, 10, (0, 10)),
    ('5', '20', (5, 20)),
    (-3, 0, (0, 10)),
    ('x', 'y', (0, 10)),
    (0, 1000, (0, 100)),
])
def test_normalize_page(offset, limit, expected):
    assert normalize_page(offset, limit) == expected
