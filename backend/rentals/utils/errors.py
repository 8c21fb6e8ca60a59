from flask import jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge
from marshmallow import ValidationError


class ApiError(Exception):
    """
    Business error raised by services and routes.

    Rendered as ``{"success": false, "message": ...}`` with ``status_code``.
    """
    def __init__(self, message, status_code=400, errors=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}
        self.payload = payload or {}


class NotFoundError(ApiError):
    def __init__(self, message="Not found", **kwargs):
        super().__init__(message, 404, **kwargs)


class ForbiddenError(ApiError):
    def __init__(self, message="Forbidden", **kwargs):
        super().__init__(message, 403, **kwargs)


class AuthError(ApiError):
    """401 with a ``WWW-Authenticate: Bearer`` challenge."""

    def __init__(self, message="Authentication required", **kwargs):
        super().__init__(message, 401, **kwargs)


def _error_body(message, errors=None, payload=None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if payload:
        body["payload"] = payload
    return body


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        response = jsonify(_error_body(err.message, err.errors, err.payload))
        response.status_code = err.status_code
        if isinstance(err, AuthError):
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err: ValidationError):
        messages = err.messages if hasattr(err, "messages") else str(err)
        return jsonify(_error_body("Invalid data", errors=messages)), 400

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(err: RequestEntityTooLarge):
        limit = app.config.get("MAX_CONTENT_LENGTH")
        app.logger.info("[http] rejected body over %s bytes", limit)
        return jsonify(_error_body("Request body too large")), 413

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return jsonify(_error_body(err.description or "HTTP error")), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # full traceback to the console
        app.logger.exception(err)
        return jsonify(_error_body("Internal server error")), 500
