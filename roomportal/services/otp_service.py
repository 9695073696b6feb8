import logging
import secrets
from datetime import timedelta

from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

from roomportal.errors import InvalidRequest, NotFound, Unauthorized
from roomportal.extensions import db
from roomportal.models import User
from roomportal.utils.dates import utcnow

logger = logging.getLogger(__name__)


def log_otp_sender(user, code):
    """Default delivery: write the code to the log. SMS gateways plug in via OTP_SENDER."""
    logger.info("OTP for user %s (%s): %s", user.id, user.phone_number, code)


def normalize_phone(phone):
    return ''.join(ch for ch in str(phone or '') if ch.isdigit() or ch == '+')


class OtpService:

    @staticmethod
    def generate_code(length):
        return ''.join(secrets.choice('0123456789') for _ in range(length))

    @staticmethod
    def send_otp(email, phone):
        """Issue a fresh one-time password to the user matching both email and phone."""
        if not email or not phone:
            raise InvalidRequest('Email and phone number are required')

        user = User.query.filter_by(email=email.strip().lower(), phone_number=normalize_phone(phone)).first()
        if not user:
            raise NotFound('You are not our user')

        code = OtpService.generate_code(current_app.config['OTP_LENGTH'])
        user.otp_hash = generate_password_hash(code)
        user.otp_expiry = utcnow() + timedelta(minutes=current_app.config['OTP_TTL_MINUTES'])
        db.session.commit()

        sender = current_app.config.get('OTP_SENDER') or log_otp_sender
        sender(user, code)
        return user

    @staticmethod
    def verify_otp(phone, otp):
        """Return the verified user, or raise Unauthorized."""
        if not phone or not otp:
            raise InvalidRequest('Phone number and OTP are required')

        user = User.query.filter(
            User.phone_number == normalize_phone(phone),
            User.otp_hash.isnot(None)
        ).first()
        if not user or user.otp_expiry is None or user.otp_expiry < utcnow():
            raise Unauthorized('Invalid or expired OTP')
        if not check_password_hash(user.otp_hash, str(otp).strip()):
            raise Unauthorized('Invalid or expired OTP')

        user.is_verified = True
        user.otp_hash = None
        user.otp_expiry = None
        db.session.commit()
        logger.info("User %s verified by OTP", user.id)
        return user
