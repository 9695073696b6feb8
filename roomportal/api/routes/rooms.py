from datetime import datetime, time

from flask import Blueprint, request, jsonify, current_app

from roomportal.errors import InvalidRequest, NotFound
from roomportal.extensions import db
from roomportal.models import Room
from roomportal.services import get_booking_service
from roomportal.utils.dates import utcnow
from roomportal.utils.decorators import token_required
from roomportal.utils.requests import timestamp_field, int_field

rooms_bp = Blueprint('rooms', __name__)


def _flag(name):
    return request.args.get(name, '').lower() in ('1', 'true', 'yes')


@rooms_bp.route('/', methods=['GET'])
@token_required
def list_rooms(current_user):
    query = Room.query
    if _flag('working_only'):
        query = query.filter(Room.is_working == True)  # noqa: E712
    return jsonify([r.to_dict() for r in query.order_by(Room.name).all()])


@rooms_bp.route('/<int:room_id>', methods=['GET'])
@token_required
def get_room(current_user, room_id):
    room = db.session.get(Room, room_id)
    if not room:
        raise NotFound('Room not found')
    return jsonify(room.to_dict())


@rooms_bp.route('/<int:room_id>/bookings', methods=['GET'])
@token_required
def room_bookings(current_user, room_id):
    start = timestamp_field(request.args, 'start_time', required=False)
    end = timestamp_field(request.args, 'end_time', required=False)
    bookings = get_booking_service().list_bookings_for_room(
        room_id, start, end, include_cancelled=_flag('include_cancelled')
    )
    return jsonify([b.to_dict() for b in bookings])


@rooms_bp.route('/<int:room_id>/availability', methods=['GET'])
@token_required
def room_availability(current_user, room_id):
    start = timestamp_field(request.args, 'start_time')
    end = timestamp_field(request.args, 'end_time')
    exclude = int_field(request.args, 'exclude_booking_id', required=False)

    availability = get_booking_service().check_availability(room_id, start, end, exclude)
    return jsonify({
        'room_id': room_id,
        'start_time': start.isoformat(),
        'end_time': end.isoformat(),
        'is_free': availability.is_free,
        'conflicts': [b.to_dict() for b in availability.conflicts]
    })


@rooms_bp.route('/availability', methods=['GET'])
@token_required
def availability_board(current_user):
    """Free slots of every working room within working hours of one day."""
    date_str = request.args.get('date')
    try:
        target_date = datetime.strptime(date_str, "%Y-%m-%d").date() if date_str else utcnow().date()
    except ValueError:
        raise InvalidRequest("'date' must be YYYY-MM-DD")
    min_capacity = int_field(request.args, 'min_capacity', required=False) or 1

    day_start = datetime.combine(target_date, time(hour=current_app.config['WORKING_HOURS_START']))
    day_end = datetime.combine(target_date, time(hour=current_app.config['WORKING_HOURS_END']))

    # Can't book in the past
    now = utcnow().replace(second=0, microsecond=0)
    if day_start < now:
        day_start = now
    if day_start >= day_end:
        return jsonify({'date': target_date.isoformat(), 'rooms': []})

    checker = get_booking_service().checker
    rooms = Room.query.filter(
        Room.capacity >= min_capacity,
        Room.is_working == True  # noqa: E712
    ).order_by(Room.capacity, Room.name).all()

    results = []
    for room in rooms:
        slots = checker.free_slots(room.id, day_start, day_end)
        if slots:
            results.append({
                'room_id': room.id,
                'room_name': room.name,
                'capacity': room.capacity,
                'slots': [{'start': s.isoformat(), 'end': e.isoformat()} for s, e in slots]
            })
    return jsonify({'date': target_date.isoformat(), 'rooms': results})
