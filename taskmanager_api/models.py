"""
Database Models for the Task Manager API.

Defines the SQLAlchemy ORM models for users and the tasks they own.  Each
task is scoped to exactly one user via ``user_id``, which enables strict
tenant isolation -- users can only see and modify their own tasks.

Key Concepts Demonstrated:
- SQLAlchemy declarative ORM models with typed columns
- One-to-many relationship with cascading deletes
- Opaque bearer tokens stored on the user row
- Timezone-aware datetime handling (UTC normalisation)
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone

from . import db

AUTH_TOKEN_BYTES = 32
TITLE_MAX_LENGTH = 200


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """
    Normalise a datetime to UTC.

    SQLite does not store timezone information, so datetime values read
    back from the database may be *naive* even though they were written in
    UTC.  Naive values are assumed UTC; aware values are converted.

    Args:
        value: A datetime instance, or ``None``.

    Returns:
        A timezone-aware UTC datetime, or ``None``.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class User(db.Model):
    """
    User identity as seen by the task API.

    Accounts are provisioned elsewhere; this service only reads users to
    authenticate requests and to scope task ownership.

    Attributes:
        id: Auto-incrementing integer primary key.
        email: Unique email address (max 120 chars).
        auth_token: Opaque bearer credential.  Indexed because every
            request looks a user up by it.
        created_at: Timestamp of account creation, stored as UTC.
        tasks: Tasks owned by this user.
    """

    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    email: str = db.Column(db.String(120), unique=True, nullable=False)
    auth_token: str = db.Column(db.String(128), unique=True, nullable=False, index=True)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    tasks = db.relationship(
        "Task",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Task.id",
    )

    @staticmethod
    def generate_auth_token() -> str:
        """Return a fresh URL-safe random token."""
        return secrets.token_urlsafe(AUTH_TOKEN_BYTES)

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class Task(db.Model):
    """
    Task owned by a single user.

    Attributes:
        id: Auto-incrementing primary key, immutable.
        user_id: Owning user.  Set at creation and never reassigned.
            Indexed for fast per-user queries.
        title: Short summary of the task (max 200 characters).
        description: Optional longer text.
        done: Whether the task has been completed.
        deadline: Optional timezone-aware deadline.
        created_at: Timestamp of task creation (UTC).
        updated_at: Timestamp of last modification (UTC, auto-updated).
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    # Every repository query filters on this column so that users can
    # never reach tasks belonging to another user.
    user_id: int = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: str = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    done: bool = db.Column(db.Boolean, nullable=False, default=False)
    deadline: datetime | None = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    user = db.relationship("User", back_populates="tasks")

    @property
    def is_late(self) -> bool:
        """True when the deadline has passed and the task is still open."""
        deadline = ensure_utc(self.deadline)
        return bool(deadline and not self.done and deadline < utc_now())

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
