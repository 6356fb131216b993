# practice_backend/errors.py

from flask import jsonify
from werkzeug.exceptions import HTTPException

# Error taxonomy shared by services and routes. Every failure leaves the API
# as {"error": <message>} with the matching status code.


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Access token required"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"


class Internal(ApiError):
    pass


def error_response(message, status_code):
    return jsonify({"error": message}), status_code


def register_error_handlers(app, session=None):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return error_response(err.message, err.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        if err.code == 404:
            return error_response("Route not found", 404)
        return error_response(err.description or err.name, err.code)

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        app.logger.exception("Unhandled error: %s", err)
        if session is not None:
            session.rollback()
        internal = Internal()
        return error_response(internal.message, internal.status_code)
