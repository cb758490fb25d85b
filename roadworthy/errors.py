"""
Error taxonomy and JSON error handlers.

Services raise ValidationError / NotFoundError; the handlers registered here
translate them (and anything unexpected) into JSON responses at the request
boundary.
"""
from flask import jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge


class RoadworthyError(Exception):
    """Base class for errors reported to API clients."""
    status_code = 500

    def __init__(self, message, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self):
        payload = {'message': self.message}
        payload.update(self.extra)
        return payload


class ValidationError(RoadworthyError):
    """Bad input: missing/duplicate fields, unknown checklist item, bad index."""
    status_code = 400


class NotFoundError(RoadworthyError):
    status_code = 404


def register_error_handlers(app):
    """Install JSON error handlers on the Flask app."""

    @app.errorhandler(RoadworthyError)
    def handle_roadworthy_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error):
        return jsonify({'message': 'Uploaded file is too large'}), 413

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        # Non-API paths keep Werkzeug's default HTML pages
        if not request.path.startswith('/api'):
            return error
        return jsonify({'message': error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        app.logger.exception('Unhandled error on %s %s', request.method, request.path)
        return jsonify({'message': 'Internal server error'}), 500
