import os
from dotenv import load_dotenv

load_dotenv()

# Variables that must be present before the app serves production traffic.
REQUIRED_PRODUCTION_ENV_VARS = ("SECRET_KEY", "DATABASE_URL")


def validate_required_env_vars():
    """
    Check that required environment variables are set.

    Raises:
        ValueError: If any required variable is missing or empty.
    """
    missing = [
        name for name in REQUIRED_PRODUCTION_ENV_VARS
        if not os.getenv(name)
    ]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )


class Config:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', os.urandom(24))

    # Play history store
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///neosynth.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Shuffle engine: where the controller's history client talks to
    HISTORY_API_BASE_URL = os.getenv('HISTORY_API_BASE_URL', 'http://localhost:8000/api')
    HISTORY_REQUEST_TIMEOUT = float(os.getenv('HISTORY_REQUEST_TIMEOUT', 10))
    SHUFFLE_SESSION_PREFIX = 'shuffle_'

    # Application settings
    DEBUG = False
    TESTING = False
    PORT = int(os.getenv('PORT', 8000))
    HOST = os.getenv('HOST', '0.0.0.0')


class ProductionConfig(Config):
    """Production configuration."""
    CONFIG_NAME = 'production'


class DevelopmentConfig(Config):
    """Development configuration."""
    CONFIG_NAME = 'development'
    DEBUG = True
    TESTING = False
    PORT = 8000
    HOST = 'localhost'


class TestingConfig(Config):
    """Testing configuration."""
    CONFIG_NAME = 'testing'
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    HISTORY_API_BASE_URL = 'http://testserver/api'
    HISTORY_REQUEST_TIMEOUT = 2.0
    PORT = 8000
    HOST = 'localhost'


# Dictionary for easy config selection
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
