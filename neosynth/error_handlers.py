"""
Global Flask error handlers.

Provides consistent error responses across all endpoints by catching
service-layer exceptions and Pydantic validation errors.
"""

import logging
from flask import jsonify
from pydantic import ValidationError

from neosynth.services import (
    PlayHistoryError,
    PlayHistoryValidationError,
)

logger = logging.getLogger(__name__)


def json_error_response(message: str, status_code: int, category: str = "error"):
    """Create a standardized JSON error response."""
    return (
        jsonify({"success": False, "message": message, "category": category}),
        status_code,
    )


def register_error_handlers(app):
    """
    Register global error handlers with the Flask app.

    Args:
        app: The Flask application instance.
    """

    # =========================================================================
    # Validation Errors (400)
    # =========================================================================

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """Handle Pydantic validation errors."""
        errors_list = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            errors_list.append(f"{field}: {msg}" if field else msg)

        message = "; ".join(errors_list) if errors_list else "Validation failed"
        logger.warning("Validation error: %s", message)
        return json_error_response(message, 400)

    @app.errorhandler(PlayHistoryValidationError)
    def handle_play_history_validation_error(
        error: PlayHistoryValidationError,
    ):
        """Handle play history requests missing required data."""
        logger.warning("Play history validation error: %s", error)
        return json_error_response(str(error), 400)

    # =========================================================================
    # Server Errors (500)
    # =========================================================================

    @app.errorhandler(PlayHistoryError)
    def handle_play_history_error(error: PlayHistoryError):
        """Handle play history store failures."""
        logger.error("Play history error: %s", error)
        return json_error_response("Play history operation failed.", 500)

    # =========================================================================
    # HTTP Error Codes
    # =========================================================================

    @app.errorhandler(400)
    def handle_bad_request(error):
        """Handle 400 Bad Request."""
        return json_error_response("Bad request.", 400)

    @app.errorhandler(404)
    def handle_not_found(error):
        """Handle 404 Not Found."""
        return json_error_response("Resource not found.", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        """Handle 405 Method Not Allowed."""
        return json_error_response("Method not allowed.", 405)

    @app.errorhandler(500)
    def handle_internal_error(error):
        """Handle 500 Internal Server Error."""
        logger.error("Internal server error: %s", error, exc_info=True)
        return json_error_response("An unexpected error occurred.", 500)

    logger.info("Global error handlers registered")
