"""Error taxonomy and JSON error handlers."""
import logging

from flask import jsonify
from flask_babel import lazy_gettext as _l
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from visiondesk.extensions import db

logger = logging.getLogger('visiondesk.errors')


class VisionDeskError(Exception):
    """Base class for errors turned into a structured JSON response."""
    status_code = 500
    code = 'internal_error'
    default_message = _l('Internal server error.')

    def __init__(self, message=None):
        super().__init__(message)
        self.message = message if message is not None else self.default_message

    def to_dict(self):
        return {'error': self.code, 'message': str(self.message)}


class AuthError(VisionDeskError):
    """Authentication failed.

    ``MissingToken`` and ``InvalidToken`` render the same body so callers
    cannot tell an absent token from a rejected one.
    """
    status_code = 401
    code = 'unauthorized'
    default_message = _l('Authentication required.')

    def to_dict(self):
        return {'error': self.code, 'message': str(AuthError.default_message)}


class MissingToken(AuthError):
    pass


class InvalidToken(AuthError):
    pass


class InvalidCredentials(AuthError):
    default_message = _l('Invalid email or password.')

    def to_dict(self):
        return {'error': self.code, 'message': str(self.default_message)}


class ForbiddenOperation(VisionDeskError):
    status_code = 403
    code = 'forbidden'
    default_message = _l('You are not allowed to perform this operation.')


class NotFound(VisionDeskError):
    status_code = 404
    code = 'not_found'
    default_message = _l('Resource not found.')


class Conflict(VisionDeskError):
    status_code = 409
    code = 'conflict'
    default_message = _l('The resource is still referenced.')


class ValidationError(VisionDeskError):
    status_code = 400
    code = 'validation_error'
    default_message = _l('Invalid request.')


def register_error_handlers(app):
    """Render every error as ``{"error": ..., "message": ...}``."""

    @app.errorhandler(VisionDeskError)
    def handle_visiondesk_error(error):
        if isinstance(error, AuthError):
            logger.info('Authentication failed: %s', type(error).__name__)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        db.session.rollback()
        logger.info('Integrity error: %s', error.orig)
        conflict = Conflict(_l('The request conflicts with existing data.'))
        return jsonify(conflict.to_dict()), conflict.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        body = {'error': (error.name or 'error').lower().replace(' ', '_'),
                'message': error.description}
        return jsonify(body), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception('Unhandled error')
        return jsonify(VisionDeskError().to_dict()), 500
