"""Exception hierarchy for burstsms.

All exceptions inherit from :class:`BurstSMSError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`burstsms.exit_codes`.
The CLI entry point in :func:`burstsms.app.main` catches ``BurstSMSError``
and exits with the matching code.

Subclass hierarchy::

    BurstSMSError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- APIError            (exit 1, 3, 4 or 5 depending on the response)
    +-- ConfigError         (exit 1)

Transport failures raised by :mod:`httpx` (timeouts, refused connections)
are not part of this hierarchy. They propagate from the
request engine unchanged.
"""

from __future__ import annotations

from burstsms.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)
from burstsms.models import ErrorClassification, ResponseCode


class BurstSMSError(Exception):
    """Base exception for all burstsms errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(BurstSMSError):
    """Raised before any network call when arguments violate an operation's precondition."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(BurstSMSError):
    """Raised for configuration problems (missing credentials, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class APIError(BurstSMSError):
    """Raised when the API answers with a non-2xx status.

    The exception wraps the :class:`~burstsms.models.ErrorClassification`
    produced by :func:`~burstsms.client.response.classify_error` and exposes
    its fields directly.

    Attributes:
        classification: The full classification record.
        code: The provider :class:`~burstsms.models.ResponseCode`.
        description: Provider description, raw body text, or a placeholder.
        http_status: The HTTP status code of the response.
    """

    def __init__(self, classification: ErrorClassification):
        self.classification = classification
        super().__init__(
            f"{classification.kind.value} (HTTP {classification.http_status}): "
            f"{classification.description}",
            exit_code=_exit_code_for(classification),
        )

    @property
    def code(self) -> ResponseCode:
        return self.classification.kind

    @property
    def description(self) -> str:
        return self.classification.description

    @property
    def http_status(self) -> int:
        return self.classification.http_status


def _exit_code_for(classification: ErrorClassification) -> int:
    if classification.kind in (
        ResponseCode.AUTH_FAILED,
        ResponseCode.AUTH_FAILED_NO_DATA,
        ResponseCode.NO_ACCESS,
    ):
        return EXIT_AUTH_FAILURE
    if classification.kind == ResponseCode.NOT_FOUND:
        return EXIT_NOT_FOUND
    if classification.http_status >= 500:
        return EXIT_SERVER_ERROR
    return EXIT_GENERIC_FAILURE
