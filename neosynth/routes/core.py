"""
Core routes: health check.
"""

import logging
from datetime import datetime, timezone

from flask import jsonify

from neosynth.routes import main

logger = logging.getLogger(__name__)


@main.route("/health")
def health():
    """Health check endpoint for Docker and monitoring."""
    from neosynth import is_db_available

    db_healthy = is_db_available()
    overall_status = "healthy" if db_healthy else "degraded"

    return (
        jsonify({
            "status": overall_status,
            "checks": {"database": "ok" if db_healthy else "unavailable"},
            "timestamp": datetime.now(
                timezone.utc
            ).isoformat(),
        }),
        200,
    )
