"""
Shared service utilities.

Provides the commit-with-rollback pattern used by every service that
writes to the database.
"""

import logging
from typing import Type

from neosynth.models.db import db

logger = logging.getLogger(__name__)


def safe_commit(
    operation_name: str,
    exception_class: Type[Exception] = Exception,
) -> None:
    """
    Commit the current database session with rollback on failure.

    On success, logs an info message. On failure, rolls back, logs the
    error with exc_info, and raises the specified exception class.

    Args:
        operation_name: Human-readable description of the operation
            (used in log messages and exception text).
        exception_class: The exception class to raise on failure.
            Defaults to Exception.

    Raises:
        The specified exception_class with a message describing
        the failure.
    """
    try:
        db.session.commit()
        logger.info("Success: %s", operation_name)
    except Exception as e:
        db.session.rollback()
        logger.error(
            "Failed to %s: %s",
            operation_name,
            e,
            exc_info=True,
        )
        raise exception_class(
            f"Failed to {operation_name}: {e}"
        )
