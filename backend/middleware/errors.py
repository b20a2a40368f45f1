# backend/middleware/errors.py

import logging

from flask import jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from models import db
from services.errors import QuoteError, StorageError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """
    Map service errors and HTTP errors to JSON responses.

    Services raise ValidationError / NotFoundError / ReferenceConflictError /
    StorageError; the routes let them propagate to here.
    """

    @app.errorhandler(QuoteError)
    def handle_quote_error(error):
        if isinstance(error, StorageError):
            logger.error(f"{request.method} {request.path} failed: {error.message}")
        else:
            logger.warning(f"{request.method} {request.path} rejected ({error.code}): {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error(f"Unhandled database error on {request.method} {request.path}: {error}")
        return jsonify(StorageError('Database operation failed').to_dict()), 500

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'error': 'Bad Request',
            'message': 'The request body could not be parsed',
            'code': 'BAD_REQUEST'
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        if request.path.startswith('/api/'):
            return jsonify({
                'error': 'Not Found',
                'message': f'The requested endpoint {request.path} does not exist',
                'code': 'NOT_FOUND',
                'available_endpoints': '/api/health for service status'
            }), 404
        return jsonify({'error': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': f'The method {request.method} is not allowed for endpoint {request.path}',
            'code': 'METHOD_NOT_ALLOWED',
            'allowed_methods': list(error.valid_methods) if getattr(error, 'valid_methods', None) else None
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.',
            'code': 'INTERNAL_ERROR'
        }), 500
