import io

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import or_

from roomportal.errors import InvalidRequest, NotFound
from roomportal.extensions import db
from roomportal.models import User, Room
from roomportal.services.otp_service import normalize_phone
from roomportal.services.roster_service import import_users
from roomportal.utils.decorators import token_required, admin_required
from roomportal.utils.pagination import pagination_meta
from roomportal.utils.requests import json_body, page_args

admin_bp = Blueprint('admin', __name__)

USER_SORT_FIELDS = {
    'name': User.name,
    'email': User.email,
    'phone_number': User.phone_number,
    'created_at': User.created_at,
    'employee_id': User.employee_id,
}

ROOM_FIELDS = ('name', 'capacity', 'location', 'phone', 'no_of_chairs',
               'has_tv', 'has_monitor', 'has_board', 'is_working')
ROOM_FLAGS = ('has_tv', 'has_monitor', 'has_board', 'is_working')
ROLES = ('user', 'admin')


def _get_or_404(model, ident, label):
    obj = db.session.get(model, ident)
    if not obj:
        raise NotFound(f'{label} not found')
    return obj


# --- USERS MANAGEMENT ---

@admin_bp.route('/users', methods=['GET'])
@token_required
@admin_required
def get_users(current_user):
    offset, limit = page_args()
    search = request.args.get('search', '').strip()
    sort_column = USER_SORT_FIELDS.get(request.args.get('sort_by'), User.name)
    descending = request.args.get('sort_order', 'asc').lower() == 'desc'

    query = User.query
    if search:
        term = f'%{search}%'
        query = query.filter(or_(
            User.name.ilike(term),
            User.email.ilike(term),
            User.phone_number.ilike(term),
            User.employee_id.ilike(term)
        ))

    total = query.count()
    ordering = (sort_column.desc(), User.id.desc()) if descending else (sort_column.asc(), User.id.asc())
    users = query.order_by(*ordering).offset(offset).limit(limit).all()
    return jsonify({
        'users': [u.to_dict() for u in users],
        'pagination': pagination_meta(total, offset, limit)
    }), 200


@admin_bp.route('/users', methods=['POST'])
@token_required
@admin_required
def create_user(current_user):
    data = json_body()
    email = (data.get('email') or '').strip().lower()
    name = (data.get('name') or '').strip()
    if not email or not name:
        raise InvalidRequest('Name and email are required')
    if User.query.filter_by(email=email).first():
        raise InvalidRequest('Email already exists')
    role = data.get('role', 'user')
    if role not in ROLES:
        raise InvalidRequest("Role must be 'user' or 'admin'")

    new_user = User(
        name=name,
        email=email,
        phone_number=normalize_phone(data.get('phone_number')) or None,
        employee_id=data.get('employee_id'),
        role=role
    )
    db.session.add(new_user)
    db.session.commit()
    current_app.logger.info(f"User {new_user.id} created by admin {current_user.id}")
    return jsonify({'message': 'User created successfully', 'user': new_user.to_dict()}), 201


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@token_required
@admin_required
def update_user(current_user, user_id):
    user = _get_or_404(User, user_id, 'User')
    data = json_body()

    if 'email' in data:
        email = (data['email'] or '').strip().lower()
        clash = User.query.filter(User.email == email, User.id != user.id).first()
        if not email or clash:
            raise InvalidRequest('Email already exists' if clash else 'Email is required')
        user.email = email
    if 'name' in data:
        user.name = data['name']
    if 'phone_number' in data:
        user.phone_number = normalize_phone(data['phone_number']) or None
    if 'employee_id' in data:
        user.employee_id = data['employee_id']
    if 'role' in data:
        if data['role'] not in ROLES:
            raise InvalidRequest("Role must be 'user' or 'admin'")
        user.role = data['role']

    db.session.commit()
    return jsonify({'message': 'User updated', 'user': user.to_dict()}), 200


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_user(current_user, user_id):
    user = _get_or_404(User, user_id, 'User')

    # Prevent deleting yourself
    if user.id == current_user.id:
        raise InvalidRequest('Cannot delete yourself')

    # Their bookings stay in the ledger for history.
    db.session.delete(user)
    db.session.commit()
    return jsonify({'message': 'User deleted'}), 200


@admin_bp.route('/users/import', methods=['POST'])
@token_required
@admin_required
def import_users_csv(current_user):
    upload = request.files.get('file')
    if not upload or not upload.filename:
        raise InvalidRequest('CSV file is required')

    stats = import_users(io.BytesIO(upload.read()))
    return jsonify({'message': 'Users processed successfully', 'stats': stats}), 200


# --- ROOMS MANAGEMENT ---

def _apply_room_fields(room, data):
    for field in ROOM_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field in ROOM_FLAGS:
            if not isinstance(value, bool):
                raise InvalidRequest(f"'{field}' must be a boolean")
        elif field in ('capacity', 'no_of_chairs'):
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise InvalidRequest(f"'{field}' must be an integer")
        setattr(room, field, value)

    if not room.name:
        raise InvalidRequest('Room name is required')
    if room.capacity is None or room.capacity < 1:
        raise InvalidRequest('Capacity must be a positive integer')


@admin_bp.route('/rooms', methods=['POST'])
@token_required
@admin_required
def create_room(current_user):
    data = json_body()
    if Room.query.filter_by(name=data.get('name')).first():
        raise InvalidRequest('Room name already exists')

    new_room = Room()
    _apply_room_fields(new_room, data)
    db.session.add(new_room)
    db.session.commit()
    return jsonify({'message': 'Room created', 'room': new_room.to_dict()}), 201


@admin_bp.route('/rooms/<int:room_id>', methods=['PUT'])
@token_required
@admin_required
def update_room(current_user, room_id):
    room = _get_or_404(Room, room_id, 'Room')
    data = json_body()
    if 'name' in data and Room.query.filter(Room.name == data['name'], Room.id != room.id).first():
        raise InvalidRequest('Room name already exists')

    _apply_room_fields(room, data)
    db.session.commit()
    return jsonify({'message': 'Room updated', 'room': room.to_dict()}), 200


@admin_bp.route('/rooms/<int:room_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_room(current_user, room_id):
    room = _get_or_404(Room, room_id, 'Room')

    # Bookings reference rooms by id only and are kept as history.
    db.session.delete(room)
    db.session.commit()
    current_app.logger.info(f"Room {room_id} deleted by admin {current_user.id}")
    return jsonify({'message': 'Room deleted'}), 200
