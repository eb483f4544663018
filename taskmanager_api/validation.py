"""
Field-level validation for task input.

``validate_task_fields`` is a pure function: it inspects candidate fields
and returns a mapping of field name to violation messages without touching
the database.  An empty mapping means the input is valid.  The repository
calls it before any write so a failed validation never leaves partial
changes behind.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from .models import TITLE_MAX_LENGTH, ensure_utc

ASSIGNABLE_FIELDS = ("title", "description", "done", "deadline")

BLANK_MESSAGE = "can't be blank"


def parse_deadline(value: str | None) -> datetime | None:
    """
    Parse an optional ISO-8601 string into a UTC datetime.

    Accepts a trailing ``Z`` as UTC.  Naive values are assumed UTC.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def _validate_title(value: Any) -> list[str]:
    if not isinstance(value, str):
        if value is None:
            return [BLANK_MESSAGE]
        return ["must be a string"]
    if not value.strip():
        return [BLANK_MESSAGE]
    if len(value) > TITLE_MAX_LENGTH:
        return [f"is too long (maximum is {TITLE_MAX_LENGTH} characters)"]
    return []


def _validate_description(value: Any) -> list[str]:
    if value is not None and not isinstance(value, str):
        return ["must be a string"]
    return []


def _validate_done(value: Any) -> list[str]:
    if not isinstance(value, bool):
        return ["must be true or false"]
    return []


def _validate_deadline(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, str):
        return ["must be an ISO-8601 datetime string"]
    try:
        parse_deadline(value)
    except ValueError:
        return ["is not a valid ISO-8601 datetime"]
    return []


_FIELD_VALIDATORS = {
    "title": _validate_title,
    "description": _validate_description,
    "done": _validate_done,
    "deadline": _validate_deadline,
}


def validate_task_fields(
    fields: Mapping[str, Any], *, partial: bool = False
) -> dict[str, list[str]]:
    """
    Check candidate task fields against the task constraints.

    ``title`` is required and must contain non-whitespace text.  With
    ``partial=True`` (updates) a field that is absent is left alone, but a
    field that *is* present must still be valid -- so ``{"title": "  "}``
    fails on update too.  Keys outside ``ASSIGNABLE_FIELDS`` are ignored.

    Args:
        fields: Candidate values, usually the ``task`` member of a request
            body.
        partial: Whether absent fields are acceptable.

    Returns:
        Mapping of field name to a list of messages; empty when valid.
    """
    errors: dict[str, list[str]] = {}
    for name, validator in _FIELD_VALIDATORS.items():
        if name not in fields:
            if name == "title" and not partial:
                errors[name] = [BLANK_MESSAGE]
            continue
        messages = validator(fields[name])
        if messages:
            errors[name] = messages
    return errors


def coerce_task_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """
    Keep only assignable keys and convert them to column values.

    Must only be called on input that ``validate_task_fields`` accepted.
    """
    values = {name: fields[name] for name in ASSIGNABLE_FIELDS if name in fields}
    if "deadline" in values:
        values["deadline"] = parse_deadline(values["deadline"])
    return values
