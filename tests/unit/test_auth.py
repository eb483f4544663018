"""
Unit tests for token extraction and authentication.

Key SDET Concepts Demonstrated:
- Negative testing for missing / malformed / unknown credentials
- Decorator integration with a throwaway Flask view
"""

from __future__ import annotations

import pytest

from taskmanager_api.auth import authenticate, extract_token, require_auth
from taskmanager_api.errors import AuthenticationFailure

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc123", "abc123"),
        ("bearer   abc123  ", "abc123"),
        ("abc123", "abc123"),
        ("", None),
        ("   ", None),
        ("Bearer ", None),
        (None, None),
    ],
)
def test_extract_token(header, expected):
    """Test that bearer and bare tokens are extracted and blanks give None."""
    assert extract_token(header) == expected


def test_authenticate_resolves_user(user):
    """Test that a known token resolves to its user."""
    assert authenticate(f"Bearer {user.auth_token}") is user


def test_authenticate_accepts_bare_token(user):
    """Test that a token without the Bearer scheme is accepted."""
    assert authenticate(user.auth_token) is user


def test_authenticate_rejects_unknown_token(user):
    """Test that a token not in the user store is a 401."""
    with pytest.raises(AuthenticationFailure) as exc_info:
        authenticate("Bearer not-a-real-token")

    assert exc_info.value.status_code == 401
    assert exc_info.value.headers["WWW-Authenticate"] == "Bearer"


def test_authenticate_rejects_missing_header(db_session):
    """Test that no credential at all is a 401."""
    with pytest.raises(AuthenticationFailure):
        authenticate(None)


def test_require_auth_injects_current_user(app, user):
    """Test that the decorator passes the resolved user to the view."""
    # Arrange
    @require_auth
    def view(current_user):
        return current_user

    # Act
    with app.test_request_context(headers={"Authorization": f"Bearer {user.auth_token}"}):
        result = view()

    # Assert
    assert result is user


def test_require_auth_blocks_view_without_token(app, db_session):
    """Test that the wrapped view never runs for unauthenticated requests."""
    # Arrange
    calls = []

    @require_auth
    def view(current_user):
        calls.append(current_user)

    # Act / Assert
    with app.test_request_context():
        with pytest.raises(AuthenticationFailure):
            view()
    assert calls == []
