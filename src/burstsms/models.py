"""Canonical Pydantic models and wire enumerations shared across burstsms.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Configuration** -- :class:`ClientConfig`, the immutable connection record
handed to every client at construction.

**Wire enumerations** -- closed sets whose member *value* is the exact token
sent on, or received from, the wire: :class:`CountryCode`,
:class:`OnlyOmitBoth`, :class:`OnlyOmitInclude`, :class:`DeliveryStatus`,
:class:`MemberSelection`, :class:`NumberFilter`, and :class:`ResponseCode`.

**Outcomes** -- :class:`ErrorClassification`, :class:`Success` and
:class:`Failure`, produced once per request by the request engine.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_URL = "https://api.transmitsms.com"


# --- Configuration ---


class ClientConfig(BaseModel):
    """Connection settings for one client instance.

    Frozen after construction: the request engine reads it on every call and
    never mutates it, so a single config may back any number of concurrent
    calls.

    Example::

        ClientConfig(username="acct-key", password="acct-secret", timeout=10)
    """

    model_config = ConfigDict(frozen=True)

    api_url: str = Field(default=DEFAULT_API_URL, description="Base URL of the API")
    username: str = Field(min_length=1, description="API key used as the Basic auth user")
    password: str = Field(min_length=1, repr=False, description="API secret")
    timeout: Optional[float] = Field(
        default=None,
        description="Transport timeout in seconds; None disables the timeout",
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class StoredConfig(BaseModel):
    """On-disk configuration persisted at ``~/.config/burstsms/config.json``.

    Every field is optional: the stored values sit below environment
    variables and CLI flags in the precedence chain resolved by
    :func:`~burstsms.config.resolve_config`. ``password`` is a credential
    source descriptor (``env:VAR``, ``file:/path``, ``prompt``) or a literal.
    """

    api_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    timeout: Optional[float] = None
    verify_ssl: bool = True


# --- Wire enumerations ---


class CountryCode(str, enum.Enum):
    """Two-letter country codes accepted by the number formatting endpoints."""

    AU = "AU"
    NZ = "NZ"
    SG = "SG"
    GB = "GB"
    US = "US"


class OnlyOmitBoth(str, enum.Enum):
    """Keyword response filter for ``get-user-sms-responses``."""

    ONLY = "ONLY"
    OMIT = "OMIT"
    BOTH = "BOTH"


class OnlyOmitInclude(str, enum.Enum):
    """Opt-out filter for ``get-sms-sent``."""

    ONLY = "ONLY"
    OMIT = "OMIT"
    INCLUDE = "INCLUDE"


class DeliveryStatus(str, enum.Enum):
    """Delivery status filter for ``get-sms-sent``."""

    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    PENDING = "PENDING"


class MemberSelection(str, enum.Enum):
    """Which list members ``get-list`` returns."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ALL = "ALL"
    NONE = "NONE"


class NumberFilter(str, enum.Enum):
    """Virtual number filter for ``get-numbers``."""

    OWNED = "OWNED"
    AVAILABLE = "AVAILABLE"


class ResponseCode(str, enum.Enum):
    """Error categories reported in the provider's ``error.code`` field.

    ``UNKNOWN`` also marks error bodies that could not be interpreted.
    """

    AUTH_FAILED_NO_DATA = "AUTH_FAILED_NO_DATA"
    AUTH_FAILED = "AUTH_FAILED"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    OVER_LIMIT = "OVER_LIMIT"
    FIELD_EMPTY = "FIELD_EMPTY"
    FIELD_INVALID = "FIELD_INVALID"
    NO_ACCESS = "NO_ACCESS"
    KEY_EXISTS = "KEY_EXISTS"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_wire(cls, token: str) -> Optional[ResponseCode]:
        """Look up the member for a provider token, or ``None`` if it is not known."""
        return _RESPONSE_CODES.get(token)


_RESPONSE_CODES: dict[str, ResponseCode] = {code.value: code for code in ResponseCode}


# --- Outcomes ---


class ErrorClassification(BaseModel):
    """The interpreted form of one non-2xx response."""

    model_config = ConfigDict(frozen=True)

    kind: ResponseCode
    description: str
    http_status: int


class Success(BaseModel):
    """A 2xx response and its decoded JSON body."""

    model_config = ConfigDict(frozen=True)

    body: Any = None
    http_status: int = 200


class Failure(BaseModel):
    """A non-2xx response and its classification."""

    model_config = ConfigDict(frozen=True)

    error: ErrorClassification


Outcome = Union[Success, Failure]
