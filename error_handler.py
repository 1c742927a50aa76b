"""
JSON error handling for the API.

Expected failures (the errors.py taxonomy) become structured payloads with a
stable kind/message pair. Database outages become store_unavailable. Anything
else is logged with its traceback and answered with a generic 500, so a
single failing request never takes the server down.
"""

import logging
import traceback

from flask import jsonify, request
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from extensions import db
from errors import ProgressionError, StoreUnavailable

logger = logging.getLogger(__name__)

HTTP_ERROR_KINDS = {
    400: 'invalid_input',
    401: 'unauthorized',
    403: 'forbidden',
    404: 'not_found',
    405: 'method_not_allowed',
    413: 'file_too_large',
}


def error_response(kind, message, status_code, details=None):
    payload = {'success': False, 'error': kind, 'message': message}
    if details:
        payload['details'] = details
    return jsonify(payload), status_code


def handle_progression_error(error):
    """Expected domain failures."""
    if error.status_code >= 500:
        logger.warning(f"{error.kind} on {request.method} {request.path}: {error.message}")
    return jsonify(error.to_dict()), error.status_code


def handle_database_error(error):
    """Database unreachable or broken connection."""
    db.session.rollback()
    logger.error(f"Database error on {request.method} {request.path}: {error}")
    unavailable = StoreUnavailable('The database is currently unavailable. Please try again later.')
    return jsonify(unavailable.to_dict()), unavailable.status_code


def handle_http_error(error):
    """Werkzeug HTTP errors (abort(), unknown routes, oversize bodies)."""
    kind = HTTP_ERROR_KINDS.get(error.code, 'http_error')
    return error_response(kind, error.description or error.name, error.code)


def handle_unexpected_error(error):
    """Handle any unexpected errors."""
    db.session.rollback()
    logger.error(f"Unexpected error on {request.method} {request.path}: {error}")
    logger.error(f"Traceback: {traceback.format_exc()}")
    return error_response('server_error', 'An unexpected error occurred. Please try again later.', 500)


def register_error_handlers(app):
    app.register_error_handler(ProgressionError, handle_progression_error)
    app.register_error_handler(OperationalError, handle_database_error)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected_error)
