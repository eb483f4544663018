"""
Persistence operations on task records.

``TaskRepository`` wraps a SQLAlchemy session.  Every read takes the owner
id as an explicit argument, so a caller can never fetch a task by id
alone; a task that exists but belongs to someone else is reported exactly
like a task that does not exist.

Writes validate first and only then touch the session, so a rejected
create stores nothing and a rejected update leaves the row as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import TaskNotFound, ValidationFailure
from .models import Task
from .validation import coerce_task_fields, validate_task_fields

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("title", "deadline", "created_at", "updated_at")
SORT_ORDERS = ("asc", "desc")
# Largest id a signed 64-bit INTEGER column can hold.
MAX_TASK_ID = 2**63 - 1


class TaskRepository:
    """Owner-scoped CRUD on ``Task`` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _owned(self, owner_id: int):
        return select(Task).where(Task.user_id == owner_id)

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Task store commit failed")
            raise

    def list_by_owner(
        self,
        owner_id: int,
        *,
        title: str | None = None,
        done: bool | None = None,
        sort: str | None = None,
        order: str = "asc",
    ) -> list[Task]:
        """
        Return the owner's tasks, in insertion order unless ``sort`` is given.

        Args:
            owner_id: Id of the owning user.
            title: Case-insensitive substring the title must contain.
            done: Only return tasks with this completion state.
            sort: One of ``SORTABLE_FIELDS``.
            order: ``"asc"`` or ``"desc"``; applies to ``sort``.

        Raises:
            ValueError: ``sort`` or ``order`` is not recognised.
        """
        stmt = self._owned(owner_id)
        if title:
            stmt = stmt.where(Task.title.icontains(title, autoescape=True))
        if done is not None:
            stmt = stmt.where(Task.done == done)

        if sort is not None:
            if sort not in SORTABLE_FIELDS:
                raise ValueError(f"cannot sort by '{sort}'")
            if order not in SORT_ORDERS:
                raise ValueError(f"order must be one of {SORT_ORDERS}")
            column = getattr(Task, sort)
            stmt = stmt.order_by(column.desc() if order == "desc" else column.asc())
        # Tie-breaker keeps the result stable and defaults to insertion order.
        stmt = stmt.order_by(Task.id.asc())

        return list(self.session.scalars(stmt).all())

    def find_owned_by_id(self, owner_id: int, task_id: int) -> Task:
        """
        Fetch one task by id, scoped to its owner.

        Raises:
            TaskNotFound: No such task, or it belongs to another user.
        """
        task = None
        if 0 < task_id <= MAX_TASK_ID:
            task = self.session.scalar(self._owned(owner_id).where(Task.id == task_id))
        if task is None:
            logger.warning("Task %s not found for user_id=%s", task_id, owner_id)
            raise TaskNotFound()
        return task

    def create(self, owner_id: int, fields: Mapping[str, Any]) -> Task:
        """
        Validate ``fields`` and persist a new task owned by ``owner_id``.

        Raises:
            ValidationFailure: Input violated a field constraint; nothing
                was written.
        """
        errors = validate_task_fields(fields)
        if errors:
            logger.warning("Task create rejected, invalid fields: %s", sorted(errors))
            raise ValidationFailure(errors)

        task = Task(user_id=owner_id, **coerce_task_fields(fields))
        self.session.add(task)
        self._commit()
        logger.info("Created task %s for user_id=%s", task.id, owner_id)
        return task

    def update(self, task: Task, fields: Mapping[str, Any]) -> Task:
        """
        Validate ``fields`` and apply them to an existing task.

        Only fields present in ``fields`` change.  ``id`` and ``user_id``
        are never assignable.

        Raises:
            ValidationFailure: Input violated a field constraint; the task
                was left unchanged.
        """
        errors = validate_task_fields(fields, partial=True)
        if errors:
            logger.warning(
                "Task %s update rejected, invalid fields: %s", task.id, sorted(errors)
            )
            raise ValidationFailure(errors)

        for name, value in coerce_task_fields(fields).items():
            setattr(task, name, value)
        self._commit()
        logger.info("Updated task %s", task.id)
        return task

    def delete(self, task: Task) -> None:
        """Remove a task; its id no longer resolves afterwards."""
        task_id = task.id
        self.session.delete(task)
        self._commit()
        logger.info("Deleted task %s", task_id)
