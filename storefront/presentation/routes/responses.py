"""
JSON responses for the API blueprints

Maps OperationResult values and domain errors to HTTP responses.
"""

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from storefront import db
from storefront.buisness.core.errors import (
    ConflictError,
    DuplicateOrderNumberError,
    IllegalTransitionError,
    InsufficientStockError,
    NotFoundError,
    StorefrontDomainError,
    ValidationError,
)
from storefront.utils.logger import get_logger
from storefront.utils.logging_sanitizer import sanitize_exception_message, sanitize_payload

logger = get_logger("storefront.routes.responses")

# Checked in order; subclasses before their bases
ERROR_STATUS = (
    (ValidationError, 422),
    (NotFoundError, 404),
    (InsufficientStockError, 409),
    (IllegalTransitionError, 409),
    (DuplicateOrderNumberError, 409),
    (ConflictError, 503),
)

RETRY_AFTER_SECONDS = '1'


def status_for(error: StorefrontDomainError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 400


def error_response(error: StorefrontDomainError):
    response = jsonify({'error': error.to_dict()})
    response.status_code = status_for(error)
    if error.retryable:
        response.headers['Retry-After'] = RETRY_AFTER_SECONDS
    return response


def result_response(result, success_status: int = 200):
    """Render an OperationResult; payloads with to_dict() are serialized through it"""
    if not result.ok:
        return error_response(result.error)
    value = result.value
    if hasattr(value, 'to_dict'):
        value = value.to_dict()
    elif isinstance(value, dict):
        value = {str(key): item for key, item in value.items()}
    return jsonify(value), success_status


def json_body() -> dict:
    """Request JSON object, or ValidationError for anything else"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    logger.debug(f"{request.method} {request.path} payload: {sanitize_payload(payload)}")
    return payload


def register_error_handlers(app):
    """JSON bodies for domain errors, HTTP errors and unexpected failures"""

    @app.errorhandler(StorefrontDomainError)
    def handle_domain_error(error):
        return error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        response = jsonify({'error': {
            'code': error.name.lower().replace(' ', '_'),
            'message': error.description,
            'details': {},
            'retryable': error.code == 429,
        }})
        response.status_code = error.code
        return response

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.error(
            f"Unhandled error on {request.method} {request.path}: {sanitize_exception_message(error)}",
            exc_info=True,
        )
        db.session.rollback()
        response = jsonify({'error': {
            'code': 'internal_error',
            'message': 'Internal server error',
            'details': {},
            'retryable': False,
        }})
        response.status_code = 500
        return response
