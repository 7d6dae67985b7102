"""
Error handling and request logging middleware for the Flask application.
"""
import logging
from flask import request, g
from attendance_tracker.exceptions.base import AppError, ValidationError
from attendance_tracker.utils.response_utils import error_response
from attendance_tracker.utils.error_handling import correlation_context, new_correlation_id

logger = logging.getLogger(__name__)

def handle_errors(app):
    """Register error handlers with Flask app."""

    @app.before_request
    def setup_correlation_id():
        """Set up correlation ID for request tracking."""
        correlation_id = request.headers.get('X-Correlation-ID') or new_correlation_id()
        correlation_context.set_correlation_id(correlation_id)
        g.correlation_id = correlation_id

    @app.after_request
    def add_correlation_header(response):
        """Add correlation ID to response headers."""
        if hasattr(g, 'correlation_id'):
            response.headers['X-Correlation-ID'] = g.correlation_id
        return response

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        correlation_id = getattr(g, 'correlation_id', 'unknown')
        logger.warning(f"[{correlation_id}] Validation error: {error.message}")
        return error_response(error.message, 400, code=error.code)

    @app.errorhandler(AppError)
    def handle_app_error(error):
        correlation_id = getattr(g, 'correlation_id', 'unknown')
        logger.error(f"[{correlation_id}] Application error: {error.message}")
        return error_response(error.message, error.status_code, code=error.code)

    @app.errorhandler(404)
    def handle_not_found(error):
        correlation_id = getattr(g, 'correlation_id', 'unknown')
        logger.warning(f"[{correlation_id}] 404 error for {request.url}")
        return error_response("Resource not found", 404, code="NOT_FOUND")

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        correlation_id = getattr(g, 'correlation_id', 'unknown')
        logger.warning(f"[{correlation_id}] 405 error for {request.method} {request.url}")
        return error_response("Method not allowed", 405, code="METHOD_NOT_ALLOWED")

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        correlation_id = getattr(g, 'correlation_id', 'unknown')
        logger.error(f"[{correlation_id}] Unexpected error: {str(error)}", exc_info=True)
        return error_response("An unexpected error occurred", 500, code="INTERNAL_ERROR")


def log_requests(app):
    """Add request logging middleware."""

    @app.before_request
    def log_request_info():
        correlation_id = getattr(g, 'correlation_id', 'unknown')
        logger.info(f"[{correlation_id}] {request.method} {request.path} - {request.remote_addr}")

    @app.after_request
    def log_response_info(response):
        correlation_id = getattr(g, 'correlation_id', 'unknown')
        logger.info(f"[{correlation_id}] Response: {response.status_code}")
        return response
