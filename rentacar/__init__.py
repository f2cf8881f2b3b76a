import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config
from .controllers.reservations import bp as reservations_bp
from .exceptions import NOT_FOUND_ERRORS, ReservationError
from .models.store import Store


def _configure_logging(app: Flask):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger("rentacar").setLevel(level)
    app.logger.setLevel(level)


def _register_error_handlers(app: Flask):
    @app.errorhandler(ReservationError)
    def handle_reservation_error(e: ReservationError):
        status = 404 if isinstance(e, NOT_FOUND_ERRORS) else 400
        return jsonify({"message": e.message, "success": False}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"message": e.description, "success": False}), e.code


def create_app(config=None):
    """`config` is either a mapping of overrides or a Config subclass."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if isinstance(config, dict):
        app.config.update(config)
    elif config is not None:
        app.config.from_object(config)
    _configure_logging(app)
    Store.instance(app.config.get("DATA_PATH"))  # load data.pkl or start empty
    app.register_blueprint(reservations_bp)
    _register_error_handlers(app)

    return app
