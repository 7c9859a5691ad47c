"""Request engine -- one authenticated GET per API call.

This module provides the blocking :class:`RequestEngine` and the
non-blocking :class:`AsyncRequestEngine`. Both wrap an :mod:`httpx` client
and share the same pipeline:

1. :func:`build_request` produces a fresh :class:`httpx.Request` from the
   frozen :class:`~burstsms.models.ClientConfig`, the endpoint path and the
   ordered parameters. Credentials are attached here on every call.
2. The request is sent once. Redirects are not followed; no retries, no
   caching.
3. :func:`~burstsms.client.response.interpret` turns the response into a
   :class:`~burstsms.models.Success` or :class:`~burstsms.models.Failure`.

Transport errors raised by :mod:`httpx` propagate unchanged. Because no
request state lives on the engine itself, one engine may serve concurrent
calls from several threads (sync) or tasks (async).

Example::

    with RequestEngine(config) as engine:
        balance = engine.call("get-balance.json")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Optional

import httpx

from burstsms.client.auth import auth_headers
from burstsms.client.params import Param, build_query
from burstsms.client.response import interpret
from burstsms.exceptions import APIError
from burstsms.models import ClientConfig, Failure, Outcome

logger = logging.getLogger(__name__)

_REDACTED_PARAMS = ("password",)


def build_url(api_url: str, path: str) -> str:
    """Join the base URL and an endpoint path with exactly one slash."""
    return f"{api_url.rstrip('/')}/{path.lstrip('/')}"


def build_request(
    config: ClientConfig,
    path: str,
    params: Iterable[Param] = (),
) -> httpx.Request:
    """Build an authenticated GET request for *path*.

    Args:
        config: Connection settings and credentials.
        path: Endpoint name, e.g. ``"send-sms.json"``.
        params: Ordered ``(name, value)`` pairs; ``None`` values are dropped.

    Returns:
        A new :class:`httpx.Request`. The query string keeps the order of
        *params*.
    """
    return httpx.Request(
        "GET",
        build_url(config.api_url, path),
        params=build_query(params),
        headers=auth_headers(config),
    )


def unwrap(outcome: Outcome) -> Any:
    """Return the decoded body of a success, or raise :class:`APIError` for a failure."""
    if isinstance(outcome, Failure):
        raise APIError(outcome.error)
    return outcome.body


def _loggable_url(url: httpx.URL) -> httpx.URL:
    for name in _REDACTED_PARAMS:
        if name in url.params:
            url = url.copy_set_param(name, "***")
    return url


def _log_outcome(path: str, outcome: Outcome) -> None:
    if isinstance(outcome, Failure):
        error = outcome.error
        logger.debug(
            "%s failed: %s (HTTP %s) %s",
            path, error.kind.value, error.http_status, error.description,
        )


class RequestEngine:
    """Blocking request engine backed by :class:`httpx.Client`.

    Args:
        config: Connection settings. Read on every call, never mutated.
        client: Optional pre-built :class:`httpx.Client`. When supplied the
            engine does not close it.
        transport: Optional transport for the engine-owned client (ignored
            when *client* is given). Tests pass an
            :class:`httpx.MockTransport` here.
    """

    def __init__(
        self,
        config: ClientConfig,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=False,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> RequestEngine:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def execute(self, path: str, params: Iterable[Param] = ()) -> Outcome:
        """Send one GET request and classify the response.

        Raises:
            httpx.TransportError: On network failures, unmodified.
        """
        request = build_request(self._config, path, params)
        logger.info("About to invoke: GET %s", _loggable_url(request.url))
        response = self._client.send(request, follow_redirects=False)
        outcome = interpret(response)
        _log_outcome(path, outcome)
        return outcome

    def call(self, path: str, params: Iterable[Param] = ()) -> Any:
        """Like :meth:`execute`, but return the body or raise :class:`APIError`."""
        return unwrap(self.execute(path, params))


class AsyncRequestEngine:
    """Non-blocking request engine backed by :class:`httpx.AsyncClient`.

    Mirrors :class:`RequestEngine`; see there for the arguments.
    """

    def __init__(
        self,
        config: ClientConfig,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=False,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def __aenter__(self) -> AsyncRequestEngine:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def execute(self, path: str, params: Iterable[Param] = ()) -> Outcome:
        """Send one GET request and classify the response."""
        request = build_request(self._config, path, params)
        logger.info("About to invoke: GET %s", _loggable_url(request.url))
        response = await self._client.send(request, follow_redirects=False)
        outcome = interpret(response)
        _log_outcome(path, outcome)
        return outcome

    async def call(self, path: str, params: Iterable[Param] = ()) -> Any:
        """Like :meth:`execute`, but return the body or raise :class:`APIError`."""
        return unwrap(await self.execute(path, params))
