"""
Error taxonomy for the PetSched API.

Services raise these exceptions; a single flask-restx error handler turns
them into ``{"error": <category>, "message": <detail>}`` bodies.
"""
import logging

from flask import current_app
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class PetSchedError(Exception):
    status_code = 500
    error = 'Internal server error'

    def __init__(self, message, error=None, status_code=None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.error, 'message': self.message}


class ValidationError(PetSchedError):
    status_code = 400
    error = 'Validation failed'


class AuthenticationError(PetSchedError):
    status_code = 401
    error = 'Unauthorized'


class ForbiddenError(PetSchedError):
    status_code = 403
    error = 'Forbidden'


class NotFoundError(PetSchedError):
    status_code = 404
    error = 'Not found'


class ConflictError(PetSchedError):
    status_code = 409
    error = 'Conflict'


class UpstreamError(PetSchedError):
    status_code = 400
    error = 'Upstream service error'


HTTP_ERROR_BODIES = {
    429: {'error': 'Too many requests', 'message': 'Please try again later'},
}


def http_error_body(error):
    if error.code in HTTP_ERROR_BODIES:
        return dict(HTTP_ERROR_BODIES[error.code])
    return {'error': error.name, 'message': error.description}


def register_error_handlers(api):
    """Attach the PetSched error handlers to a flask-restx Api."""

    @api.errorhandler(PetSchedError)
    def handle_petsched_error(error):
        if error.status_code >= 500:
            logger.error(f"{error.error}: {error.message}")
        return error.to_dict(), error.status_code

    @api.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return http_error_body(error), error.code
        logger.exception(f"Unhandled error: {error}")
        message = 'Something went wrong!'
        if current_app.config.get('APP_ENV') == 'development':
            message = str(error)
        return {'error': 'Internal server error', 'message': message}, 500
