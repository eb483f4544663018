"""WSGI entry point for the task API."""

import os

from taskmanager_api import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
