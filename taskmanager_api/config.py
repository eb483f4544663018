"""
Configuration Classes for the Task Manager API.

Centralises all environment-dependent settings (database URIs, API
versioning, logging) into a hierarchy of configuration classes.  The base
``Config`` class defines sensible development defaults, while subclasses
override only what differs per environment.

Key Concepts Demonstrated:
- Class-based configuration with inheritance
- Environment-variable overrides for twelve-factor app compliance
- Separate configuration profiles for development, testing, and production
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    """
    Base configuration with development-safe defaults.

    All settings can be overridden by environment variables so that the
    same code-base can serve any environment by simply changing the
    environment.

    Attributes:
        SECRET_KEY: Flask signing key.
        SQLALCHEMY_TRACK_MODIFICATIONS: Disabled to save memory.
        SQLALCHEMY_DATABASE_URI: Database connection string (default: local
            SQLite file).
        API_VENDOR: Vendor token expected in versioned media types, e.g.
            ``application/vnd.taskmanager.v2``.
        API_DEFAULT_VERSION: Version served when the client sends no vendor
            media type in ``Accept``.
        API_URL_PREFIX: Mount point of the task API blueprint.
        LOG_LEVEL: Root logging level.
    """

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "task-manager-dev-secret-change-in-production"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'tasks.db'}",
    )

    API_VENDOR: str = os.environ.get("API_VENDOR", "taskmanager")
    API_DEFAULT_VERSION: str = os.environ.get("API_DEFAULT_VERSION", "v2")
    API_URL_PREFIX: str = os.environ.get("API_URL_PREFIX", "")

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    """
    Development environment configuration.

    Enables debug mode for auto-reloading and verbose error pages.
    """

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    Uses an in-memory SQLite database by default so that tests never touch
    development data.  Flask-SQLAlchemy shares a single connection for
    in-memory SQLite, so the test client and fixtures see the same rows.
    """

    DEBUG: bool = True
    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")


class ProductionConfig(Config):
    """
    Production environment configuration.

    Disables debug mode and testing flags.  All secrets and URIs should
    be supplied exclusively through environment variables in production.
    """

    DEBUG: bool = False
    TESTING: bool = False


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Look up and return the configuration class for the given environment.

    Args:
        env: Environment name (``"development"``, ``"testing"``,
            ``"production"``).  When ``None``, falls back to the
            ``FLASK_ENV`` environment variable, defaulting to
            ``"development"``.

    Returns:
        The configuration class (not an instance) corresponding to the
        requested environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
