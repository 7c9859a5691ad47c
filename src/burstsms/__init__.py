"""burstsms -- Typed client for the Burst SMS (transmitsms) REST API.

Every remote operation is a single authenticated ``GET`` against
``{api_url}/{endpoint}.json``. This package turns typed, optional Python
arguments into query parameters, dispatches the request through
:mod:`httpx`, and maps the JSON reply into either a decoded body or a
typed :class:`~burstsms.exceptions.APIError`.

Typical usage::

    from burstsms import BurstSMS, ClientConfig

    config = ClientConfig(username="api-key", password="secret")
    with BurstSMS(config) as sms:
        sms.send_sms("Hello", to=["61491570156"])

Modules:
    api: The endpoint facade (:class:`BurstSMS`, :class:`AsyncBurstSMS`).
    client: Request engine, parameter serializer, and error classifier.
    models: Pydantic models and wire enumerations.
    config: XDG-aware configuration and credential resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from burstsms.api import AsyncBurstSMS, BurstSMS
from burstsms.exceptions import APIError, BurstSMSError, ConfigError, InvalidUsageError
from burstsms.models import (
    ClientConfig,
    CountryCode,
    DeliveryStatus,
    ErrorClassification,
    MemberSelection,
    NumberFilter,
    OnlyOmitBoth,
    OnlyOmitInclude,
    ResponseCode,
)

__all__ = [
    "APIError",
    "AsyncBurstSMS",
    "BurstSMS",
    "BurstSMSError",
    "ClientConfig",
    "ConfigError",
    "CountryCode",
    "DeliveryStatus",
    "ErrorClassification",
    "InvalidUsageError",
    "MemberSelection",
    "NumberFilter",
    "OnlyOmitBoth",
    "OnlyOmitInclude",
    "ResponseCode",
]
