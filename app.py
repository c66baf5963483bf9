import logging

from flask import Flask, jsonify
from flask_jwt_extended import JWTManager
from sqlalchemy.exc import SQLAlchemyError

from config import REQUIRED_SECRETS, Config
from errors import BookingError, StorageUnavailable
from models import db
from routes.admin_routes import admin_bp
from routes.auth_routes import auth_bp
from routes.booking_routes import booking_bp
from routes.cart_routes import cart_bp
from routes.show_routes import show_bp
from seed import seed_if_empty

jwt = JWTManager()


def bootstrap_store(app):
    """Create missing tables and seed the starter data once."""
    try:
        db.create_all()
        if app.config["SEED_ON_STARTUP"] and seed_if_empty(
            db.session,
            app.config["ADMIN_USERNAME"],
            app.config["ADMIN_PASSWORD"],
            app.config["ADMIN_EMAIL"],
            app.config["PEPPER"],
        ):
            app.logger.info("Database created with initial data")
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageUnavailable() from exc


def register_error_handlers(app):
    @app.errorhandler(BookingError)
    def handle_booking_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(exc):
        db.session.rollback()
        app.logger.exception("Storage error")
        return jsonify(StorageUnavailable().to_dict()), StorageUnavailable.status_code


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    missing = [key for key in REQUIRED_SECRETS if not app.config.get(key)]
    if missing and not app.config.get("TESTING"):
        raise RuntimeError(f"{', '.join(missing)} environment variable is not set.")

    app.logger.setLevel(logging.INFO)

    db.init_app(app)
    jwt.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(show_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(admin_bp)
    register_error_handlers(app)

    with app.app_context():
        try:
            bootstrap_store(app)
        except StorageUnavailable:
            # Keep serving; every store call will answer with 503
            app.logger.exception("Failed to initialize database")

    return app


if __name__ == '__main__':
    create_app().run(debug=True)
