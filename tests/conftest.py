"""Shared test fixtures for burstsms.

Provides a ready-made client configuration, a recording mock transport for
the HTTP primitive, XDG/env isolation for config tests, and output state
resets. These fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from burstsms.models import ClientConfig
from burstsms.output import reset_output


API_URL = "https://api.example.com"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> ClientConfig:
    """A client config pointing at a fake API host."""
    return ClientConfig(api_url=API_URL, username="acct-key", password="acct-secret")


class Recorder:
    """Mock transport handler that records requests and replays canned responses.

    Args:
        status_code: Status of every reply.
        json_body: JSON body of every reply (ignored when *content* is set).
        content: Raw body bytes of every reply.
    """

    def __init__(
        self,
        status_code: int = 200,
        json_body: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        self.json_body = {"error": {"code": "SUCCESS", "description": "OK"}} if json_body is None else json_body
        self.content = content
        self.headers = headers or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content, headers=self.headers)
        return httpx.Response(
            self.status_code,
            content=json.dumps(self.json_body).encode("utf-8"),
            headers={"content-type": "application/json", **self.headers},
        )

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def query(self, index: int = -1) -> list[tuple[str, str]]:
        """Decoded query parameters of a recorded request, in order."""
        return list(self.requests[index].url.params.multi_items())


@pytest.fixture
def recorder() -> Recorder:
    """A recorder answering every request with HTTP 200 and a small JSON body."""
    return Recorder()


@pytest.fixture
def make_recorder() -> Callable[..., Recorder]:
    """Factory for recorders with custom canned responses."""
    return Recorder


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at tmp_path, forces the XDG code path, and
    clears all BURSTSMS_* environment variables.

    Returns:
        The directory that will hold ``burstsms/config.json``.
    """
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr("burstsms.config._is_xdg_platform", lambda: True)

    for var in ["BURSTSMS_API_URL", "BURSTSMS_USERNAME", "BURSTSMS_PASSWORD"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return config_home / "burstsms"


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
