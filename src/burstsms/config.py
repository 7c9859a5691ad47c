"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for burstsms:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.burstsms/`` on macOS and Windows. See :func:`get_config_dir`.
* **Stored config** -- a single :class:`~burstsms.models.StoredConfig`
  JSON file, written atomically by :func:`save_stored_config`.
* **Precedence resolution** -- :func:`resolve_config` merges explicit
  arguments, ``BURSTSMS_*`` environment variables and the stored config into
  the frozen :class:`~burstsms.models.ClientConfig` used by the clients.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from burstsms.exceptions import ConfigError
from burstsms.models import DEFAULT_API_URL, ClientConfig, StoredConfig

_APP_NAME = "burstsms"
_CONFIG_FILENAME = "config.json"

ENV_API_URL = "BURSTSMS_API_URL"
ENV_USERNAME = "BURSTSMS_USERNAME"
ENV_PASSWORD = "BURSTSMS_PASSWORD"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/burstsms/`` (default ``~/.config/burstsms/``).
    On macOS/Windows: ``~/.burstsms/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_path() -> Path:
    """Path to the stored config file."""
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temp file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX. It is removed on failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        # The file may hold a literal secret.
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Stored config ---


def load_stored_config() -> StoredConfig:
    """Load the stored configuration.

    Returns:
        The deserialised :class:`~burstsms.models.StoredConfig`, or a
        default instance when no file exists.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = config_path()
    if not path.is_file():
        return StoredConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return StoredConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_stored_config(config: StoredConfig) -> Path:
    """Persist *config* atomically and return the file path."""
    path = config_path()
    data = config.model_dump(mode="json", exclude_none=True)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


# --- Precedence resolution ---


def resolve_config(
    api_url: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ClientConfig:
    """Resolve the effective client configuration.

    Precedence (high to low):
        1. Explicit arguments (CLI flags)
        2. Environment variables (``BURSTSMS_API_URL``, ``BURSTSMS_USERNAME``,
           ``BURSTSMS_PASSWORD``)
        3. Stored config (``~/.config/burstsms/config.json``)
        4. Defaults

    Only the stored password is treated as a credential source descriptor;
    arguments and environment variables are taken literally.

    Raises:
        ConfigError: If no username or password can be resolved, or the
            stored config is invalid.
    """
    stored = load_stored_config()

    resolved_url = api_url or os.environ.get(ENV_API_URL) or stored.api_url or DEFAULT_API_URL
    resolved_user = username or os.environ.get(ENV_USERNAME) or stored.username
    resolved_password = password or os.environ.get(ENV_PASSWORD)
    if not resolved_password and stored.password:
        resolved_password = resolve_credential(stored.password)

    if not resolved_user:
        raise ConfigError(
            f"No username configured: pass --username, set {ENV_USERNAME}, "
            "or run 'burstsms configure'"
        )
    if not resolved_password:
        raise ConfigError(
            f"No password configured: pass --password, set {ENV_PASSWORD}, "
            "or run 'burstsms configure'"
        )

    try:
        return ClientConfig(
            api_url=resolved_url,
            username=resolved_user,
            password=resolved_password,
            timeout=timeout if timeout is not None else stored.timeout,
            verify_ssl=stored.verify_ssl,
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts interactively (requires a TTY)
        - anything else -- used literally

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Burst SMS API secret: ")

    return source
