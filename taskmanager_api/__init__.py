"""
Task Manager API Flask Application Factory.

Provides the ``create_app`` factory function that assembles the versioned
task API.  The factory pattern allows multiple application instances with
different configurations (development, testing, production) to coexist in
the same process.

The application registers one blueprint:
  * **api_bp** -- JSON endpoints for the task resource, mounted at
    ``API_URL_PREFIX`` (the root by default).

Key Concepts Demonstrated:
- Application factory pattern (``create_app``)
- SQLAlchemy integration with Flask via ``flask_sqlalchemy``
- Fail-fast validation of versioning configuration
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from .config import get_config

db = SQLAlchemy()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path in ("", ":memory:"):
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the task API application.

    Instantiates the Flask app, loads the appropriate configuration object,
    checks that the default API version is one the serializers know,
    initialises SQLAlchemy, registers the API blueprint, and ensures that
    all database tables exist.

    Args:
        config_name: Optional configuration environment name
            (``"development"``, ``"testing"``, ``"production"``).  When *None*,
            the value is read from the ``FLASK_ENV`` environment variable,
            defaulting to ``"development"``.

    Returns:
        A fully configured Flask application instance ready to serve requests.

    Raises:
        ValueError: If ``API_DEFAULT_VERSION`` names an unknown version.
    """
    from .versioning import ApiVersion

    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logger.info("Creating task API app with config: %s", config_class.__name__)

    # Unknown default versions are a deployment mistake; refuse to start.
    app.config["API_DEFAULT_VERSION"] = ApiVersion(app.config["API_DEFAULT_VERSION"])

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    db.init_app(app)

    from .routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix=app.config.get("API_URL_PREFIX") or None)

    with app.app_context():
        db.create_all()
        logger.info("Task API database tables created")

    return app
