"""Test helper functions shared across the test suites."""

from __future__ import annotations

from typing import Any

from flask.testing import FlaskClient

DEFAULT_VERSION = "v2"
VENDOR = "taskmanager"


def versioned_media_type(version: str = DEFAULT_VERSION) -> str:
    """Return the vendor media type for ``version``."""
    return f"application/vnd.{VENDOR}.{version}"


def api_headers(
    token: str | None,
    version: str | None = DEFAULT_VERSION,
    *,
    bearer: bool = True,
) -> dict[str, str]:
    """Build JSON API headers with token auth and a versioned Accept."""
    headers = {"Content-Type": "application/json"}
    if version is not None:
        headers["Accept"] = versioned_media_type(version)
    if token is not None:
        headers["Authorization"] = f"Bearer {token}" if bearer else token
    return headers


def task_body(**fields: Any) -> dict[str, Any]:
    """Wrap task fields in the ``{"task": {...}}`` request envelope."""
    return {"task": fields}


def create_via_api(client: FlaskClient, headers: dict[str, str], **fields: Any):
    """POST a task and return the response."""
    return client.post("/tasks", json=task_body(**fields), headers=headers)
