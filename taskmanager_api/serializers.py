"""
Response envelope rendering.

Successful responses carry a ``data`` member holding one resource object
or a list of them; failures carry an ``errors`` member mapping field names
to messages.  Each API version is one ``TaskSerializer`` variant, looked
up once from ``SERIALIZERS``.  Versions differ only in attribute naming
and in which attributes they expose, never in envelope shape.

Resource object layout::

    {"id": "42", "type": "tasks", "attributes": {...}}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .models import Task, ensure_utc
from .versioning import ApiVersion

RESOURCE_TYPE = "tasks"
SHORT_DESCRIPTION_LENGTH = 40


def _to_utc_iso(value) -> str | None:
    value = ensure_utc(value)
    return value.isoformat() if value is not None else None


def dasherize(name: str) -> str:
    """``created_at`` -> ``created-at``."""
    return name.replace("_", "-")


def truncate(text: str | None, length: int = SHORT_DESCRIPTION_LENGTH) -> str | None:
    """Shorten ``text`` to ``length`` characters, ending in ``...`` when cut."""
    if text is None or len(text) <= length:
        return text
    return text[: length - 3] + "..."


class TaskSerializer:
    """Version 1 rendering: snake_case attribute keys."""

    version = ApiVersion.V1

    def format_key(self, name: str) -> str:
        return name

    def attributes(self, task: Task) -> dict[str, Any]:
        return {
            "title": task.title,
            "description": task.description,
            "done": bool(task.done),
            "deadline": _to_utc_iso(task.deadline),
            "user_id": task.user_id,
            "created_at": _to_utc_iso(task.created_at),
            "updated_at": _to_utc_iso(task.updated_at),
        }

    def resource(self, task: Task) -> dict[str, Any]:
        return {
            "id": str(task.id),
            "type": RESOURCE_TYPE,
            "attributes": {
                self.format_key(name): value
                for name, value in self.attributes(task).items()
            },
        }

    def one(self, task: Task) -> dict[str, Any]:
        """Envelope for a single task."""
        return {"data": self.resource(task)}

    def many(self, tasks: Iterable[Task]) -> dict[str, Any]:
        """Envelope for a list of tasks (possibly empty)."""
        return {"data": [self.resource(task) for task in tasks]}

    def errors(self, errors: Mapping[str, Sequence[str]]) -> dict[str, Any]:
        """Envelope for field errors, keyed by this version's convention."""
        return render_errors(errors, key_format=self.format_key)


class TaskSerializerV2(TaskSerializer):
    """Version 2 rendering: dasherized keys plus derived attributes."""

    version = ApiVersion.V2

    def format_key(self, name: str) -> str:
        return dasherize(name)

    def attributes(self, task: Task) -> dict[str, Any]:
        attributes = super().attributes(task)
        attributes["short_description"] = truncate(task.description)
        attributes["is_late"] = task.is_late
        return attributes


SERIALIZERS: dict[ApiVersion, TaskSerializer] = {
    ApiVersion.V1: TaskSerializer(),
    ApiVersion.V2: TaskSerializerV2(),
}


def serializer_for(version: ApiVersion) -> TaskSerializer:
    """Return the serializer variant for ``version``."""
    return SERIALIZERS[version]


def render_errors(errors: Mapping[str, Sequence[str]], key_format=None) -> dict[str, Any]:
    """
    Build an ``{"errors": {...}}`` envelope.

    Args:
        errors: Field name -> messages.
        key_format: Optional callable renaming field keys; used when a
            version has been negotiated.
    """
    key_format = key_format or (lambda name: name)
    return {"errors": {key_format(field): list(messages) for field, messages in errors.items()}}
