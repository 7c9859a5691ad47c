"""HTTP Basic authentication for Burst SMS requests.

The API key is the user name and the API secret the password. The pair is
Base64-encoded and sent as an ``Authorization: Basic`` header per
:rfc:`7617`. Headers are rebuilt from the frozen
:class:`~burstsms.models.ClientConfig` for every request; nothing is cached
between calls.
"""

from __future__ import annotations

import base64

from burstsms.models import ClientConfig


def basic_auth_header(username: str, password: str) -> str:
    """Return the ``Authorization`` header value for *username* and *password*."""
    raw = f"{username}:{password}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


def auth_headers(config: ClientConfig) -> dict[str, str]:
    """Build the authentication and content negotiation headers for one request.

    Args:
        config: The client configuration holding the credentials.

    Returns:
        A fresh header dict; callers may mutate it freely.
    """
    return {
        "Accept": "application/json",
        "Authorization": basic_auth_header(config.username, config.password),
    }
