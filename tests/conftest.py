"""
Shared pytest fixtures for the Task Manager API test suite.

Provides the Flask application, test client, database session, users with
bearer tokens, a task factory, and versioned request headers used by the
unit, integration, and security suites.

Key SDET Concepts Demonstrated:
- Session-scoped vs function-scoped fixtures for performance and isolation
- Factory pattern (user_factory, task_factory) for flexible test data
- Fresh schema per test to prevent test pollution
"""

from __future__ import annotations

import os
from datetime import datetime

import pytest
from faker import Faker

os.environ["FLASK_ENV"] = "testing"

from taskmanager_api import create_app, db
from taskmanager_api.models import Task, User

from tests.helpers import api_headers

fake = Faker()


@pytest.fixture(scope="session")
def app():
    """
    Provide the Flask application instance for the entire test session.

    Created once with the 'testing' configuration (in-memory SQLite).
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a Flask test client scoped to a single test function."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test function.

    Creates all tables before the test, yields the db instance, then rolls
    back and drops all tables so the next test starts from nothing.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def user_factory(db_session):
    """
    Factory fixture that inserts users with fresh bearer tokens.

    Returns a callable ``_create_user(**kwargs)``.
    """

    def _create_user(*, email: str | None = None, auth_token: str | None = None) -> User:
        user = User(
            email=email or fake.unique.email(),
            auth_token=auth_token or User.generate_auth_token(),
        )
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """The authenticated caller in most tests."""
    return user_factory()


@pytest.fixture
def other_user(user_factory) -> User:
    """A second user, for tenant-isolation assertions."""
    return user_factory()


@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture that creates Task rows in the test database.

    Returns a callable ``_create_task(user, **kwargs)`` that inserts a task
    with Faker-generated defaults and commits it.
    """

    def _create_task(
        user: User,
        *,
        title: str | None = None,
        description: str | None = None,
        done: bool = False,
        deadline: datetime | None = None,
    ) -> Task:
        task = Task(
            user_id=user.id,
            title=title or fake.sentence(nb_words=4),
            description=description or fake.paragraph(),
            done=done,
            deadline=deadline,
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def headers(user) -> dict[str, str]:
    """v2 JSON headers authenticated as ``user``."""
    return api_headers(user.auth_token)


@pytest.fixture
def v1_headers(user) -> dict[str, str]:
    """v1 JSON headers authenticated as ``user``."""
    return api_headers(user.auth_token, version="v1")


@pytest.fixture
def other_headers(other_user) -> dict[str, str]:
    """v2 JSON headers authenticated as ``other_user``."""
    return api_headers(other_user.auth_token)
