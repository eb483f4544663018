"""
Error taxonomy for the Task Manager API.

Every failure the API reports deliberately is an ``ApiError`` subclass
carrying its HTTP status code and a field -> messages mapping.  The
blueprint's error handler renders all of them into the same
``{"errors": {...}}`` envelope, so route handlers simply ``raise``.

Errors that are not tied to a single input field are reported under the
``base`` key.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

BASE_ERROR_KEY = "base"


class ApiError(Exception):
    """
    Base class for errors that map onto a structured API response.

    Attributes:
        status_code: HTTP status code sent to the client.
        errors: Mapping of field name to a list of human-readable messages.
        headers: Extra response headers (e.g. ``WWW-Authenticate``).
    """

    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(
        self,
        message: str | None = None,
        errors: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if errors is None:
            errors = {BASE_ERROR_KEY: [self.message]}
        self.errors: dict[str, list[str]] = {
            field: list(messages) for field, messages in errors.items()
        }
        self.headers: dict[str, str] = {}


class MalformedRequest(ApiError):
    """The request body could not be parsed into task fields."""

    status_code = 400
    default_message = "Request body must be a JSON object with a 'task' member"


class AuthenticationFailure(ApiError):
    """Missing or unrecognised credential."""

    status_code = 401
    default_message = "Not authorized"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)
        self.headers["WWW-Authenticate"] = "Bearer"


class TaskNotFound(ApiError):
    """Task id is absent or not owned by the caller (indistinguishable)."""

    status_code = 404
    default_message = "Task not found"


class VersionUnsupported(ApiError):
    """The Accept header asked for an API version this service lacks."""

    status_code = 406
    default_message = "Unsupported API version"


class UnsupportedMediaType(ApiError):
    """A request body was sent without a JSON content type."""

    status_code = 415
    default_message = "Content-Type must be application/json"


class ValidationFailure(ApiError):
    """Field constraints were violated; nothing was written."""

    status_code = 422
    default_message = "Validation failed"

    def __init__(self, errors: Mapping[str, Sequence[str]]) -> None:
        super().__init__(self.default_message, errors)
