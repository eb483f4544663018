"""
REST API Endpoints for the task resource.

Every task endpoint runs the same pipeline: authenticate the bearer token,
negotiate the API version from ``Accept``, perform the operation through
the owner-scoped ``TaskRepository``, and render the result with the
negotiated version's serializer.  Failures are raised as ``ApiError``
subclasses and rendered by the blueprint's error handlers, so every
response -- success or failure -- is a JSON envelope.

Endpoints:
    GET    /health           - Service health check (public)
    GET    /tasks            - List the caller's tasks (optional filters)
    GET    /tasks/<id>       - Retrieve a single task
    POST   /tasks            - Create a task
    PUT    /tasks/<id>       - Update a task (PATCH behaves the same)
    DELETE /tasks/<id>       - Delete a task

Key Concepts Demonstrated:
- Decorator composition (``require_auth`` then ``negotiated``)
- Tenant isolation by threading the caller's id into every lookup
- Centralised error rendering with blueprint error handlers
"""

from __future__ import annotations

import logging
import os
from typing import Any

from flask import Blueprint, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from .. import db
from ..auth import require_auth
from ..errors import BASE_ERROR_KEY, ApiError, MalformedRequest, UnsupportedMediaType
from ..models import User
from ..repository import SORT_ORDERS, SORTABLE_FIELDS, TaskRepository
from ..serializers import render_errors, serializer_for
from ..versioning import VERSION_HEADER, ApiVersion, current_api_version, negotiated

logger = logging.getLogger(__name__)

api_bp = Blueprint("task_api", __name__)

TRUE_VALUES = ("true", "1")
FALSE_VALUES = ("false", "0")


# =====================================================================
# Helper Functions
# =====================================================================


def _repository() -> TaskRepository:
    return TaskRepository(db.session)


def _task_fields() -> dict[str, Any]:
    """
    Extract the ``task`` member from a JSON request body.

    Raises:
        UnsupportedMediaType: The body is not declared as JSON.
        MalformedRequest: The body is not a JSON object with a ``task``
            object inside.
    """
    if not request.is_json:
        raise UnsupportedMediaType()

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise MalformedRequest("Request body must be a valid JSON object")

    fields = body.get("task")
    if not isinstance(fields, dict):
        raise MalformedRequest(errors={"task": ["is missing or not an object"]})
    return fields


def _parse_done(raw: str | None) -> bool | None:
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise MalformedRequest(errors={"done": ["must be true or false"]})


def _list_filters() -> dict[str, Any]:
    """Read and check the optional list query-string parameters."""
    sort = request.args.get("sort")
    order = request.args.get("order", "asc").lower()
    errors: dict[str, list[str]] = {}
    if sort is not None and sort not in SORTABLE_FIELDS:
        errors["sort"] = [f"must be one of: {', '.join(SORTABLE_FIELDS)}"]
    if order not in SORT_ORDERS:
        errors["order"] = [f"must be one of: {', '.join(SORT_ORDERS)}"]
    if errors:
        raise MalformedRequest(errors=errors)

    return {
        "title": request.args.get("title") or None,
        "done": _parse_done(request.args.get("done")),
        "sort": sort,
        "order": order,
    }


# =====================================================================
# Request Hooks
# =====================================================================


@api_bp.before_request
def reset_negotiated_version() -> None:
    """Forget any version left on ``g`` by an earlier request."""
    g.pop("api_version", None)


@api_bp.after_request
def add_version_headers(response: Response) -> Response:
    """Advertise that responses depend on ``Accept`` and which version was used."""
    response.vary.add("Accept")
    version = current_api_version()
    if version is not None:
        response.headers[VERSION_HEADER] = version.value
    return response


# =====================================================================
# API Endpoints
# =====================================================================


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """
    Return service health status.

    This endpoint is public (no authentication required) and is intended
    for load-balancer and orchestrator liveness checks.
    """
    return (
        jsonify(
            {
                "status": "healthy",
                "service": "tasks",
                "environment": os.getenv("ENVIRONMENT", "unknown"),
            }
        ),
        200,
    )


@api_bp.route("/tasks", methods=["GET"])
@require_auth
@negotiated
def list_tasks(current_user: User, api_version: ApiVersion) -> tuple[Response, int]:
    """
    List the authenticated user's tasks.

    Query Parameters:
        title: Case-insensitive substring filter on the title.
        done: ``true`` / ``false`` completion filter.
        sort: ``title``, ``deadline``, ``created_at`` or ``updated_at``.
        order: ``asc`` (default) or ``desc``.

    Returns:
        ``{"data": [...]}`` with 200; insertion order unless sorted.
    """
    logger.info("GET /tasks - Listing tasks for user_id=%s", current_user.id)
    tasks = _repository().list_by_owner(current_user.id, **_list_filters())
    return jsonify(serializer_for(api_version).many(tasks)), 200


@api_bp.route("/tasks/<int:task_id>", methods=["GET"])
@require_auth
@negotiated
def show_task(
    task_id: int, current_user: User, api_version: ApiVersion
) -> tuple[Response, int]:
    """
    Retrieve one of the authenticated user's tasks.

    Returns:
        ``{"data": {...}}`` with 200, or a 404 error envelope when the task
        is missing or owned by someone else.
    """
    logger.info("GET /tasks/%s - user_id=%s", task_id, current_user.id)
    task = _repository().find_owned_by_id(current_user.id, task_id)
    return jsonify(serializer_for(api_version).one(task)), 200


@api_bp.route("/tasks", methods=["POST"])
@require_auth
@negotiated
def create_task(current_user: User, api_version: ApiVersion) -> tuple[Response, int]:
    """
    Create a task owned by the authenticated user.

    Request Body (JSON)::

        {"task": {"title": "...", "description": "...",
                  "done": false, "deadline": "2030-01-01T12:00:00Z"}}

    Returns:
        ``{"data": {...}}`` with 201, a 422 envelope of field errors, or
        400/415 when the body cannot be read.
    """
    logger.info("POST /tasks - Creating task for user_id=%s", current_user.id)
    task = _repository().create(current_user.id, _task_fields())
    return jsonify(serializer_for(api_version).one(task)), 201


@api_bp.route("/tasks/<int:task_id>", methods=["PUT", "PATCH"])
@require_auth
@negotiated
def update_task(
    task_id: int, current_user: User, api_version: ApiVersion
) -> tuple[Response, int]:
    """
    Update one of the authenticated user's tasks.

    Only the fields present in ``task`` change.  The owner lookup happens
    before the body is read, so another user's id is a plain 404.

    Returns:
        ``{"data": {...}}`` with 200, 404, 422 (task unchanged), or 400/415.
    """
    logger.info("%s /tasks/%s - user_id=%s", request.method, task_id, current_user.id)
    repository = _repository()
    task = repository.find_owned_by_id(current_user.id, task_id)
    task = repository.update(task, _task_fields())
    return jsonify(serializer_for(api_version).one(task)), 200


@api_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
@require_auth
@negotiated
def delete_task(task_id: int, current_user: User, api_version: ApiVersion) -> Response:
    """
    Delete one of the authenticated user's tasks.

    Returns:
        An empty 204 response, or a 404 error envelope.
    """
    logger.info("DELETE /tasks/%s - user_id=%s", task_id, current_user.id)
    repository = _repository()
    repository.delete(repository.find_owned_by_id(current_user.id, task_id))
    return Response(status=204)


# =====================================================================
# Error Handlers
# =====================================================================


@api_bp.errorhandler(ApiError)
def handle_api_error(error: ApiError) -> tuple[Response, int]:
    """Render an ``ApiError`` in the negotiated version's error envelope."""
    logger.warning(
        "%s %s -> %s %s", request.method, request.path, error.status_code, error.message
    )
    version = current_api_version()
    if version is not None:
        body = serializer_for(version).errors(error.errors)
    else:
        body = render_errors(error.errors)
    response = jsonify(body)
    response.headers.update(error.headers)
    return response, error.status_code


@api_bp.app_errorhandler(500)
def internal_error(error: HTTPException) -> tuple[Response, int]:
    """Log the failure and return a JSON 500 envelope."""
    original = getattr(error, "original_exception", None) or error
    logger.error("Internal server error: %s", original, exc_info=original)
    return jsonify(render_errors({BASE_ERROR_KEY: ["Internal server error"]})), 500


@api_bp.app_errorhandler(HTTPException)
def http_error(error: HTTPException) -> tuple[Response, int]:
    """Render routing errors (unknown URL, wrong method) as JSON envelopes."""
    response = error.get_response()
    response.data = jsonify(
        render_errors({BASE_ERROR_KEY: [error.description or error.name]})
    ).get_data()
    response.content_type = "application/json"
    return response, error.code
