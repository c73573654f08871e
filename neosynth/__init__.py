import os
import logging
from typing import Optional
from flask import Flask
from flask_migrate import Migrate
from config import config, validate_required_env_vars

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

_migrate: Optional[Migrate] = None


def is_db_available() -> bool:
    """
    Check if the SQLAlchemy database is initialized and available.

    Returns:
        True if database is available, False otherwise.
    """
    try:
        from neosynth.models.db import db
        from flask import current_app

        # Verify we're in app context and db is initialized
        if not current_app:
            return False
        # Quick test query
        db.session.execute(db.text("SELECT 1"))
        return True
    except Exception:
        return False


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "production")

    # Ensure config_name is a string
    if not isinstance(config_name, str) or config_name not in config:
        config_name = "production"

    logger.info("Creating app with config: %s", config_name)

    # Validate required environment variables
    try:
        validate_required_env_vars()
        logger.info("Environment validation passed")
    except ValueError as e:
        logger.error("Environment validation failed: %s", str(e))
        if config_name == "production":
            raise  # Fail fast in production
        else:
            logger.warning(
                "Continuing in %s mode with missing environment variables",
                config_name,
            )

    app = Flask(__name__)

    # Load config
    app.config.from_object(config[config_name])

    logger.info("CONFIG_NAME: %s", app.config.get("CONFIG_NAME", config_name))
    logger.info(
        "HISTORY_API_BASE_URL: %s", app.config.get("HISTORY_API_BASE_URL")
    )

    # Initialize SQLAlchemy database
    try:
        from neosynth.models.db import db

        db.init_app(app)

        global _migrate
        _migrate = Migrate(app, db)

        with app.app_context():
            if app.config.get("TESTING"):
                # Tests use in-memory SQLite -- create tables directly
                db.create_all()
            else:
                # Development and production: use Alembic migrations.
                # Without a migrations environment, fall back to
                # db.create_all() for convenience.
                migrations_dir = os.path.join(
                    os.path.dirname(os.path.dirname(__file__)),
                    "migrations",
                )
                if os.path.isfile(os.path.join(migrations_dir, "env.py")):
                    from flask_migrate import upgrade
                    upgrade(directory=migrations_dir)
                else:
                    logger.warning(
                        "No migrations environment found. "
                        "Using db.create_all() as fallback."
                    )
                    db.create_all()

        logger.info(
            "SQLAlchemy database initialized: %s",
            app.config.get("SQLALCHEMY_DATABASE_URI", "not set"),
        )
    except Exception as e:
        logger.warning(
            "Database initialization failed: %s. "
            "Play history will be unavailable.",
            e,
        )

    # Register blueprints
    from neosynth.routes import main as main_blueprint

    app.register_blueprint(main_blueprint)

    # Register global error handlers
    from neosynth.error_handlers import register_error_handlers

    register_error_handlers(app)

    return app
