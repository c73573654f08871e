"""
Flask routes package for NeoSynth.

This module handles HTTP requests and responses only.
All business logic is delegated to the services layer.

The single `main` Blueprint is split across feature modules for
navigability. All modules import `main` from this package and
register routes on it.
"""

from flask import (
    Blueprint,
    request,
    jsonify,
)
import functools
import logging

from pydantic import ValidationError

from neosynth.schemas import validate_user_id

logger = logging.getLogger(__name__)
main = Blueprint("main", __name__)


# =============================================================================
# Helper Functions (shared across all route modules)
# =============================================================================


def json_error(message: str, status_code: int = 400) -> tuple:
    """Return a JSON error response."""
    return (
        jsonify({
            "success": False,
            "message": message,
            "category": "error",
        }),
        status_code,
    )


def json_success(message: str, **extra) -> dict:
    """Return a JSON success response."""
    return jsonify({
        "success": True,
        "message": message,
        "category": "success",
        **extra,
    })


def _first_error_message(error: ValidationError) -> str:
    first_error = error.errors()[0] if error.errors() else {}
    return first_error.get("msg", "Invalid input")


def validate_json(schema_class):
    """
    Parse and validate the JSON request body against a Pydantic schema.

    Returns:
        (parsed_model, None) on success.
        (None, error_response_tuple) on failure.

    Usage::

        parsed, err = validate_json(MySchema)
        if err:
            return err
        # use parsed.field ...
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return None, json_error(
            "Request body must be JSON.", 400
        )

    try:
        return schema_class(**data), None
    except ValidationError as e:
        return None, json_error(
            f"Validation error: {_first_error_message(e)}", 400
        )


def validate_query(schema_class):
    """
    Validate the query string against a Pydantic schema.

    Same return convention as validate_json().
    """
    try:
        return schema_class(**request.args.to_dict()), None
    except ValidationError as e:
        return None, json_error(
            f"Validation error: {_first_error_message(e)}", 400
        )


def require_user_and_db(f):
    """
    Decorator that validates the path user id and database availability.

    Checks performed in order:
    1. validate_user_id() -- returns 400 for a malformed id
    2. is_db_available() -- returns 503 if DB is down

    Replaces the ``user_id`` keyword argument with its normalized form.

    Usage::

        @main.route("/api/users/<user_id>/thing")
        @require_user_and_db
        def my_route(user_id):
            ...
    """
    @functools.wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            kwargs["user_id"] = validate_user_id(kwargs.get("user_id"))
        except ValueError:
            return json_error("Invalid user ID", 400)

        from neosynth import is_db_available
        if not is_db_available():
            return json_error(
                "Database is unavailable.", 503
            )

        return f(*args, **kwargs)

    return decorated_function


# =============================================================================
# Import route modules to register their routes on the Blueprint.
# These must be at the bottom to avoid circular imports.
# =============================================================================

from neosynth.routes import (  # noqa: E402, F401
    core,
    shuffle,
)
