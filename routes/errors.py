"""
JSON error responses for the document engine exceptions.

Every handler answers with ``{"success": false, "error": <message>}``
plus whatever structured detail the exception carries.
"""

import logging

from flask import jsonify

from models import db
from services.documents.exceptions import (
    ArtifactGenerationError,
    IncompleteAnswersError,
    InvalidTransitionError,
    NotFoundError,
    StepNavigationError,
    StepValidationError,
    UnauthorizedError,
    ValidationError
)

logger = logging.getLogger(__name__)


def error_response(message, status, **details):
    payload = {'success': False, 'error': message}
    payload.update(details)
    return jsonify(payload), status


def register_error_handlers(app):

    @app.errorhandler(UnauthorizedError)
    def handle_unauthorized(e):
        return error_response(str(e), 401)

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return error_response(str(e), 404)

    @app.errorhandler(StepValidationError)
    def handle_step_validation(e):
        failures = {name: reason.value for name, reason in e.failures.items()}
        return error_response(
            str(e), 422, step=e.step_number, failures=failures, messages=e.messages
        )

    @app.errorhandler(IncompleteAnswersError)
    def handle_incomplete(e):
        return error_response(str(e), 422, missing=list(e.missing))

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        details = {'field': e.field} if e.field else {}
        return error_response(str(e), 400, **details)

    @app.errorhandler(InvalidTransitionError)
    @app.errorhandler(StepNavigationError)
    def handle_conflict(e):
        return error_response(str(e), 409)

    @app.errorhandler(ArtifactGenerationError)
    def handle_generator_failure(e):
        logger.error(f"Artifact generation failed: {e}")
        return error_response(str(e), 502)

    @app.errorhandler(404)
    def handle_missing_route(e):
        return error_response('Not found', 404)

    @app.errorhandler(405)
    def handle_bad_method(e):
        return error_response('Method not allowed', 405)

    @app.errorhandler(500)
    def handle_server_error(e):
        db.session.rollback()
        return error_response('Internal server error', 500)
