from flask import Blueprint, jsonify, current_app
import jwt
from datetime import datetime, timedelta, timezone

from roomportal.services.otp_service import OtpService
from roomportal.utils.decorators import token_required
from roomportal.utils.requests import json_body

auth_bp = Blueprint('auth', __name__)


def issue_token(user):
    return jwt.encode({
        'user_id': user.id,
        'role': user.role,
        'exp': datetime.now(timezone.utc) + timedelta(hours=current_app.config['TOKEN_TTL_HOURS'])
    }, current_app.config['SECRET_KEY'], algorithm="HS256")


@auth_bp.route('/send-otp', methods=['POST'])
def send_otp():
    data = json_body()
    OtpService.send_otp(data.get('email'), data.get('phone'))
    return jsonify({'message': 'OTP sent successfully'}), 200


@auth_bp.route('/verify-otp', methods=['POST'])
def verify_otp():
    data = json_body()
    user = OtpService.verify_otp(data.get('phone'), data.get('otp'))
    return jsonify({
        'message': 'OTP verified successfully',
        'verified': True,
        'token': issue_token(user),
        'user': user.to_dict()
    }), 200


@auth_bp.route('/me', methods=['GET'])
@token_required
def me(current_user):
    return jsonify(current_user.to_dict())
