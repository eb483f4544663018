"""
Token Authentication for the Task Manager API.

Resolves the opaque bearer token presented in the ``Authorization`` header
to a ``User`` row and provides a decorator for protecting endpoints.  The
API never *issues* tokens -- accounts and their tokens are provisioned
elsewhere -- it only looks them up.

Key Concepts Demonstrated:
- Decorator pattern for endpoint authentication (``require_auth``)
- Explicit injection of the authenticated user into the view
- Uniform 401 outcome for missing and unknown credentials
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps

from flask import request
from sqlalchemy import select

from . import db
from .errors import AuthenticationFailure
from .models import User

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def extract_token(authorization_header: str | None) -> str | None:
    """
    Pull the credential out of an ``Authorization`` header value.

    Both ``Bearer <token>`` and a bare ``<token>`` are accepted.

    Args:
        authorization_header: Raw header value, or ``None``.

    Returns:
        The token, or ``None`` when the header is missing or blank.
    """
    value = (authorization_header or "").strip()
    scheme, _, credentials = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        value = credentials.strip()
    return value or None


def authenticate(authorization_header: str | None) -> User:
    """
    Resolve the user identified by an ``Authorization`` header.

    Args:
        authorization_header: Raw header value, or ``None``.

    Returns:
        The authenticated ``User``.

    Raises:
        AuthenticationFailure: The credential is missing or unknown.
    """
    token = extract_token(authorization_header)
    if token is None:
        logger.warning("Rejected request without credentials")
        raise AuthenticationFailure("Missing or invalid Authorization header")

    user = db.session.scalar(select(User).where(User.auth_token == token))
    if user is None:
        logger.warning("Rejected request with unknown token")
        raise AuthenticationFailure("Invalid authentication token")
    return user


def require_auth(view_func: Callable):
    """
    Decorator that enforces token authentication on API endpoints.

    Authenticates before the wrapped view (and anything it decorates) runs,
    then passes the user as the ``current_user`` keyword argument.  A
    failure raises ``AuthenticationFailure``, which the blueprint renders
    as a ``401`` error envelope.

    Args:
        view_func: The Flask view function to protect.

    Returns:
        A wrapped view function that only executes for authenticated
        requests.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        current_user = authenticate(request.headers.get("Authorization"))
        return view_func(*args, current_user=current_user, **kwargs)

    return wrapper
