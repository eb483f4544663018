"""
API version negotiation.

Clients select an API version through a vendor media type in ``Accept``,
e.g. ``application/vnd.taskmanager.v2``.  The version is resolved once per
request into an ``ApiVersion`` member, which then picks the serializer
variant; nothing downstream inspects headers again.

Key Concepts Demonstrated:
- ``str, Enum`` as a small tagged union of supported versions
- Quality-ordered Accept parsing with Werkzeug
- Decorator that injects the negotiated version into the view
"""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum
from functools import wraps

from flask import current_app, g, request
from werkzeug.datastructures import MIMEAccept
from werkzeug.http import parse_accept_header

from .errors import VersionUnsupported

VERSION_HEADER = "X-Api-Version"


class ApiVersion(str, Enum):
    """Supported API versions."""

    V1 = "v1"
    V2 = "v2"


def _vendor_pattern(vendor: str) -> re.Pattern[str]:
    return re.compile(
        rf"^application/vnd\.{re.escape(vendor.lower())}\.(v\d+)(?:\+json)?$"
    )


def negotiate_version(
    accept_header: str | None,
    vendor: str,
    default: ApiVersion,
) -> ApiVersion:
    """
    Select the API version requested by an ``Accept`` header.

    Media ranges are considered in quality order; ranges with ``q=0`` are
    refused by the client and skipped.  The first vendor media type decides
    the version.  When the header carries no vendor media type at all
    (``*/*``, ``application/json`` or no header) the configured default is
    used.

    Args:
        accept_header: Raw ``Accept`` header value, or ``None``.
        vendor: Vendor token, e.g. ``"taskmanager"``.
        default: Version to use when no vendor media type is present.

    Returns:
        The negotiated ``ApiVersion``.

    Raises:
        VersionUnsupported: The vendor media type names an unknown version.
    """
    pattern = _vendor_pattern(vendor)
    accepted = parse_accept_header(accept_header or "", MIMEAccept)
    for media_type, quality in accepted:
        if quality <= 0:
            continue
        bare_type = media_type.split(";", 1)[0].strip().lower()
        match = pattern.match(bare_type)
        if match is None:
            continue
        requested = match.group(1)
        try:
            return ApiVersion(requested)
        except ValueError:
            raise VersionUnsupported(
                f"API version '{requested}' is not supported; "
                f"use one of: {', '.join(v.value for v in ApiVersion)}"
            ) from None
    return default


def negotiated(view_func: Callable):
    """
    Decorator that resolves the API version and passes it as ``api_version``.

    The negotiated version is also echoed back in the ``X-Api-Version``
    response header by the blueprint's ``after_request`` hook.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        api_version = negotiate_version(
            request.headers.get("Accept"),
            current_app.config["API_VENDOR"],
            current_app.config["API_DEFAULT_VERSION"],
        )
        g.api_version = api_version
        return view_func(*args, api_version=api_version, **kwargs)

    return wrapper


def current_api_version() -> ApiVersion | None:
    """Return the version negotiated for the active request, if any."""
    return g.get("api_version")
