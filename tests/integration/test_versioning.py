"""
Integration tests for API version negotiation over HTTP.

Key SDET Concepts Demonstrated:
- Content negotiation through the Accept header
- Same envelope, different attribute conventions per version
- Conservative rejection of unknown versions
"""

from __future__ import annotations

import pytest

from tests.helpers import api_headers, create_via_api

pytestmark = pytest.mark.integration


def test_v1_uses_snake_case_attributes(client, user, task_factory, v1_headers):
    """Test that v1 responses use snake_case keys."""
    # Arrange
    task = task_factory(user)

    # Act
    response = client.get(f"/tasks/{task.id}", headers=v1_headers)

    # Assert
    assert response.status_code == 200
    assert response.headers["X-Api-Version"] == "v1"
    attributes = response.get_json()["data"]["attributes"]
    assert attributes["user_id"] == user.id
    assert "user-id" not in attributes


def test_v2_uses_dasherized_attributes(client, user, task_factory, headers):
    """Test that v2 responses use dasherized keys and derived attributes."""
    # Arrange
    task = task_factory(user, description="x" * 60)

    # Act
    response = client.get(f"/tasks/{task.id}", headers=headers)

    # Assert
    assert response.headers["X-Api-Version"] == "v2"
    attributes = response.get_json()["data"]["attributes"]
    assert attributes["user-id"] == user.id
    assert attributes["short-description"].endswith("...")
    assert attributes["is-late"] is False


def test_envelope_shape_is_identical_across_versions(client, user, task_factory, headers, v1_headers):
    """Test that only attribute naming differs between versions."""
    task_factory(user)

    v1 = client.get("/tasks", headers=v1_headers).get_json()
    v2 = client.get("/tasks", headers=headers).get_json()

    assert set(v1) == set(v2) == {"data"}
    assert set(v1["data"][0]) == set(v2["data"][0]) == {"id", "type", "attributes"}


def test_missing_accept_uses_default_version(client, user, task_factory):
    """Test that a client without a vendor Accept gets the default (v2)."""
    # Arrange
    task_factory(user)
    headers = api_headers(user.auth_token, version=None)

    # Act
    response = client.get("/tasks", headers=headers)

    # Assert
    assert response.status_code == 200
    assert response.headers["X-Api-Version"] == "v2"
    assert "user-id" in response.get_json()["data"][0]["attributes"]


def test_unknown_version_returns_406(client, user):
    """Test that an unsupported version is rejected with an error envelope."""
    response = client.get("/tasks", headers=api_headers(user.auth_token, version="v9"))

    assert response.status_code == 406
    assert "base" in response.get_json()["errors"]
    assert "X-Api-Version" not in response.headers


def test_unknown_version_does_not_create(client, db_session, user):
    """Test that version rejection happens before any write."""
    response = create_via_api(client, api_headers(user.auth_token, version="v3"), title="t")

    assert response.status_code == 406
    assert user.tasks == []


def test_validation_errors_follow_version(client, v1_headers):
    """Test that the error envelope is rendered by the negotiated version."""
    response = create_via_api(client, v1_headers, title="", done="no")

    assert response.status_code == 422
    assert set(response.get_json()["errors"]) == {"title", "done"}


def test_responses_vary_on_accept(client, headers):
    response = client.get("/tasks", headers=headers)

    assert "Accept" in response.headers["Vary"]
