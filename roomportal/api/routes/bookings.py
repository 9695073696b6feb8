from flask import Blueprint, request, jsonify, current_app

from roomportal.errors import Forbidden, InvalidRequest
from roomportal.services import get_booking_service
from roomportal.utils.decorators import token_required, admin_required
from roomportal.utils.requests import json_body, timestamp_field, int_field, page_args

bookings_bp = Blueprint('bookings', __name__)


def _owned_booking(service, booking_id, current_user):
    booking = service.get_booking(booking_id)
    if booking.owner_id != current_user.id and not current_user.is_admin:
        raise Forbidden('You can only modify your own bookings')
    return booking


def _title(data):
    title = data.get('title')
    if title is None:
        return None
    title = str(title).strip()
    if len(title) > 255:
        raise InvalidRequest('Title is too long')
    return title


def _owner_listing(owner_id):
    offset, limit = page_args()
    items, pagination = get_booking_service().list_bookings_for_owner(
        owner_id,
        offset=offset,
        limit=limit,
        sort_by=request.args.get('sort_by'),
        sort_order=request.args.get('sort_order', 'desc'),
        status=request.args.get('status', 'all'),
        max_limit=current_app.config['MAX_PAGE_SIZE']
    )
    return jsonify({'bookings': items, 'pagination': pagination})


@bookings_bp.route('/', methods=['POST'])
@token_required
def create_booking(current_user):
    data = json_body()
    room_id = int_field(data, 'room_id')
    start = timestamp_field(data, 'start_time')
    end = timestamp_field(data, 'end_time')

    owner_id = current_user.id
    if current_user.is_admin and data.get('owner_id') is not None:
        owner_id = int_field(data, 'owner_id')

    booking = get_booking_service().create_booking(room_id, owner_id, start, end, _title(data))
    return jsonify({'message': 'Booking created successfully', 'booking': booking.to_dict()}), 201


@bookings_bp.route('/mine', methods=['GET'])
@token_required
def my_bookings(current_user):
    return _owner_listing(current_user.id)


@bookings_bp.route('/employee/<int:owner_id>', methods=['GET'])
@token_required
def employee_bookings(current_user, owner_id):
    if owner_id != current_user.id and not current_user.is_admin:
        raise Forbidden("Cannot view another employee's bookings")
    return _owner_listing(owner_id)


@bookings_bp.route('/<int:booking_id>', methods=['GET'])
@token_required
def get_booking(current_user, booking_id):
    booking = get_booking_service().get_booking(booking_id)
    if booking.owner_id != current_user.id and not current_user.is_admin:
        raise Forbidden("Cannot view another employee's booking")
    return jsonify(booking.to_dict())


@bookings_bp.route('/<int:booking_id>', methods=['PUT'])
@token_required
def update_booking(current_user, booking_id):
    data = json_body()
    start = timestamp_field(data, 'start_time')
    end = timestamp_field(data, 'end_time')

    service = get_booking_service()
    _owned_booking(service, booking_id, current_user)
    booking = service.update_booking(booking_id, start, end, _title(data))
    return jsonify({'message': 'Booking updated', 'booking': booking.to_dict()}), 200


@bookings_bp.route('/<int:booking_id>/cancel', methods=['POST'])
@token_required
def cancel_booking(current_user, booking_id):
    service = get_booking_service()
    _owned_booking(service, booking_id, current_user)
    service.cancel_booking(booking_id)
    return jsonify({'message': 'Booking cancelled successfully'}), 200


@bookings_bp.route('/<int:booking_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_booking(current_user, booking_id):
    get_booking_service().delete_booking(booking_id)
    current_app.logger.info(f"Booking {booking_id} deleted by admin {current_user.id}")
    return jsonify({'message': 'Booking deleted'}), 200
