import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, InternalServerError

from roomportal.config import DevelopmentConfig
from roomportal.errors import BookingError
from roomportal.extensions import db, migrate

def create_app(config_class=DevelopmentConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.getLogger('roomportal').setLevel(app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Register Blueprints
    from roomportal.api.routes.auth import auth_bp
    from roomportal.api.routes.bookings import bookings_bp
    from roomportal.api.routes.rooms import rooms_bp
    from roomportal.api.routes.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(rooms_bp, url_prefix='/api/rooms')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    register_error_handlers(app)

    @app.route('/health')
    def health():
        return {"status": "ok", "app": "RoomPortal"}

    return app

def register_error_handlers(app):
    @app.errorhandler(BookingError)
    def handle_booking_error(e):
        # Discard any half-applied edits from the rejected request.
        db.session.rollback()
        if e.status_code >= 500:
            app.logger.error(f"{type(e).__name__}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.name, 'message': e.description}), e.code

    @app.errorhandler(InternalServerError)
    def handle_server_error(e):
        original = getattr(e, 'original_exception', None) or e
        app.logger.error("Unhandled error", exc_info=original)
        return jsonify({'error': 'Server Error', 'message': 'Internal Server Error'}), 500
