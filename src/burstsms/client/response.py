"""Response interpretation -- maps :class:`httpx.Response` to outcomes.

A 2xx response is decoded by :func:`extract_response_data`. Anything else
goes through :func:`classify_error`, an ordered fallback chain that never
raises:

1. Parse the body as JSON and locate ``{"error": {"code": ..., "description": ...}}``.
2. If ``code`` is a known :class:`~burstsms.models.ResponseCode`, use it
   together with ``description``.
3. Otherwise classify as ``UNKNOWN`` and describe the failure with the raw
   body text, or with :data:`UNEXPECTED_ERROR` when the body is empty or
   cannot be read.

The provider does not always honour its error contract (gateways in front
of it answer with HTML pages or empty bodies), so step 3 must hold for any
input.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from burstsms.models import ErrorClassification, Failure, Outcome, ResponseCode, Success

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def interpret(response: httpx.Response) -> Outcome:
    """Turn a completed HTTP exchange into exactly one :data:`~burstsms.models.Outcome`."""
    if is_success(response.status_code):
        return Success(body=extract_response_data(response), http_status=response.status_code)
    return Failure(error=classify_error(response))


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from a successful response.

    Attempts to parse the body as JSON first. If that fails the raw text is
    returned. An empty body decodes to an empty dict.
    """
    if not response.content:
        return {}

    try:
        return response.json()
    except ValueError:
        return response.text


def classify_error(response: httpx.Response) -> ErrorClassification:
    """Classify a non-2xx response.

    Args:
        response: The completed response. Its body may be anything.

    Returns:
        The classification; ``kind`` is ``UNKNOWN`` whenever the provider's
        error envelope could not be interpreted.
    """
    status = response.status_code
    envelope = _parse_error_envelope(response)
    if envelope is not None:
        kind, description = envelope
        return ErrorClassification(kind=kind, description=description, http_status=status)

    return ErrorClassification(
        kind=ResponseCode.UNKNOWN,
        description=_raw_description(response),
        http_status=status,
    )


def _parse_error_envelope(response: httpx.Response) -> Optional[tuple[ResponseCode, str]]:
    """Return ``(code, description)`` from a well-formed error envelope, else ``None``."""
    try:
        body = response.json()
    except Exception as exc:
        logger.debug("Error body is not JSON (HTTP %s): %s", response.status_code, exc)
        return None

    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return None

    code = error.get("code")
    description = error.get("description")
    if not isinstance(code, str) or not isinstance(description, str):
        return None

    kind = ResponseCode.from_wire(code)
    if kind is None:
        logger.debug("Unrecognised error code %r (HTTP %s)", code, response.status_code)
        return None
    return kind, description


def _raw_description(response: httpx.Response) -> str:
    """Return the raw body text, or the generic placeholder if there is none."""
    try:
        text = response.text
    except Exception as exc:
        logger.debug("Error body could not be read (HTTP %s): %s", response.status_code, exc)
        return UNEXPECTED_ERROR
    if not text or not text.strip():
        return UNEXPECTED_ERROR
    return text
