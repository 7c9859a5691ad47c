"""Typer application and CLI entry point for burstsms.

Exposes the most common Burst SMS operations from a shell, plus ``call``
for raw access to any endpoint. Response bodies go to stdout through
:mod:`burstsms.output`; errors go to stderr and map to the exit codes in
:mod:`burstsms.exit_codes`.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import logging
import signal
import sys
from datetime import datetime
from typing import Any, Callable, Optional

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler

from burstsms import __version__
from burstsms.api import BurstSMS
from burstsms.exceptions import APIError, BurstSMSError, ConfigError, InvalidUsageError
from burstsms.exit_codes import EXIT_CONNECTION_ERROR, EXIT_GENERIC_FAILURE
from burstsms.models import (
    ClientConfig,
    CountryCode,
    MemberSelection,
    StoredConfig,
)


app = typer.Typer(
    name="burstsms",
    help="Send and manage SMS through the Burst SMS API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
sms_app = typer.Typer(help="Inspect and cancel sent messages.", no_args_is_help=True)
list_app = typer.Typer(help="Manage a contact list.", no_args_is_help=True)
app.add_typer(sms_app, name="sms")
app.add_typer(list_app, name="list")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"burstsms {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route library log records to stderr through Rich when ``--verbose`` is set."""
    logger = logging.getLogger("burstsms")
    logger.handlers = [h for h in logger.handlers if not isinstance(h, RichHandler)]
    # Records handled here must not reach a root handler as well.
    logger.propagate = not verbose
    if not verbose:
        logger.setLevel(logging.WARNING)
        return
    logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    logger.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    api_url: Optional[str] = typer.Option(
        None, "--api-url", help="API base URL."
    ),
    username: Optional[str] = typer.Option(
        None, "--username", "-u", help="API key."
    ),
    password: Optional[str] = typer.Option(
        None, "--password", help="API secret."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Initialise output and store connection overrides in ``ctx.obj``."""
    from burstsms.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url
    ctx.obj["username"] = username
    ctx.obj["password"] = password
    ctx.obj["timeout"] = timeout


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _make_client(config: ClientConfig) -> BurstSMS:
    return BurstSMS(config)


def _run(ctx: typer.Context, operation: Callable[[BurstSMS], Any]) -> None:
    """Resolve config, run *operation* against a client, and print its result.

    Known failures are reported on stderr and turned into an exit code.
    """
    from burstsms.config import resolve_config
    from burstsms.output import api_error, debug, error, format_response, suggest

    obj = ctx.obj or {}
    try:
        config = resolve_config(
            api_url=obj.get("api_url"),
            username=obj.get("username"),
            password=obj.get("password"),
            timeout=obj.get("timeout"),
        )
        debug(f"Using API at {config.api_url} as {config.username}")
        with _make_client(config) as client:
            data = operation(client)
    except ConfigError as exc:
        error(str(exc))
        suggest("Run 'burstsms configure' to store credentials.")
        raise typer.Exit(exc.exit_code)
    except APIError as exc:
        api_error(exc.classification)
        raise typer.Exit(exc.exit_code)
    except BurstSMSError as exc:
        error(str(exc))
        raise typer.Exit(exc.exit_code)
    except httpx.TransportError as exc:
        error(f"Connection failed: {exc}")
        raise typer.Exit(EXIT_CONNECTION_ERROR)

    format_response(data)


def _parse_pairs(pairs: list[str]) -> list[tuple[str, str]]:
    """Split ``KEY=VALUE`` arguments, keeping their order."""
    params: list[tuple[str, str]] = []
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Expected KEY=VALUE, got '{pair}'")
        params.append((key, value))
    return params


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("configure")
def configure_command(
    api_url: Optional[str] = typer.Option(None, "--api-url", help="API base URL to store."),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="API key to store."),
    password_source: Optional[str] = typer.Option(
        None,
        "--password-source",
        help="Where to read the secret: env:VAR, file:/path, prompt, or a literal value.",
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Default timeout in seconds."),
) -> None:
    """Store connection settings in the config file."""
    from burstsms.config import load_stored_config, save_stored_config
    from burstsms.output import error, success

    try:
        current = load_stored_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(exc.exit_code)

    updates = {
        "api_url": api_url,
        "username": username,
        "password": password_source,
        "timeout": timeout,
    }
    stored = StoredConfig.model_validate(
        {**current.model_dump(), **{k: v for k, v in updates.items() if v is not None}}
    )
    path = save_stored_config(stored)
    success(f"Saved configuration to {path}")


@app.command("balance")
def balance_command(ctx: typer.Context) -> None:
    """Show the account balance."""
    _run(ctx, lambda client: client.get_balance())


@app.command("send")
def send_command(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Message text."),
    to: Optional[list[str]] = typer.Option(
        None, "--to", "-t", help="Recipient number (repeatable)."
    ),
    list_id: Optional[int] = typer.Option(None, "--list-id", help="Send to this list."),
    from_: Optional[str] = typer.Option(None, "--from", help="Caller ID."),
    send_at: Optional[datetime] = typer.Option(
        None, "--send-at", help="Schedule for this UTC time."
    ),
    country_code: Optional[CountryCode] = typer.Option(
        None, "--country-code", case_sensitive=False, help="Format local numbers for this country."
    ),
    validity: Optional[int] = typer.Option(
        None, "--validity", help="Minutes to keep trying delivery."
    ),
    dlr_callback: Optional[str] = typer.Option(None, "--dlr-callback", help="Delivery receipt URL."),
    reply_callback: Optional[str] = typer.Option(None, "--reply-callback", help="Reply URL."),
    replies_to_email: Optional[str] = typer.Option(
        None, "--replies-to-email", help="Forward replies to this address."
    ),
    from_shared: Optional[bool] = typer.Option(
        None, "--from-shared/--no-from-shared", help="Force the shared number pool."
    ),
) -> None:
    """Send an SMS."""
    _run(ctx, lambda client: client.send_sms(
        message,
        to=to or None,
        from_=from_,
        send_at=send_at,
        list_id=list_id,
        dlr_callback=dlr_callback,
        reply_callback=reply_callback,
        validity=validity,
        replies_to_email=replies_to_email,
        from_shared=from_shared,
        country_code=country_code,
    ))


@app.command("format-number")
def format_number_command(
    ctx: typer.Context,
    number: str = typer.Argument(..., help="Number to check."),
    country_code: CountryCode = typer.Option(
        ..., "--country-code", case_sensitive=False, help="Country to validate against."
    ),
) -> None:
    """Format and validate a number."""
    _run(ctx, lambda client: client.format_number(number, country_code))


@sms_app.command("get")
def sms_get_command(ctx: typer.Context, message_id: int = typer.Argument(...)) -> None:
    """Show a sent message."""
    _run(ctx, lambda client: client.get_sms(message_id))


@sms_app.command("stats")
def sms_stats_command(ctx: typer.Context, message_id: int = typer.Argument(...)) -> None:
    """Show delivery statistics of a sent message."""
    _run(ctx, lambda client: client.get_sms_stats(message_id))


@sms_app.command("cancel")
def sms_cancel_command(ctx: typer.Context, message_id: int = typer.Argument(...)) -> None:
    """Cancel a scheduled message."""
    _run(ctx, lambda client: client.cancel_sms(message_id))


@sms_app.command("responses")
def sms_responses_command(
    ctx: typer.Context,
    message_id: Optional[int] = typer.Option(None, "--message-id"),
    keyword_id: Optional[int] = typer.Option(None, "--keyword-id"),
    keyword: Optional[str] = typer.Option(None, "--keyword"),
    number: Optional[str] = typer.Option(None, "--number"),
    msisdn: Optional[str] = typer.Option(None, "--msisdn"),
    page: Optional[int] = typer.Option(None, "--page"),
    max_results: Optional[int] = typer.Option(None, "--max"),
    include_original: Optional[bool] = typer.Option(
        None, "--include-original/--no-include-original"
    ),
) -> None:
    """Show replies to a message or keyword."""
    _run(ctx, lambda client: client.get_sms_responses(
        message_id=message_id,
        keyword_id=keyword_id,
        keyword=keyword,
        number=number,
        msisdn=msisdn,
        page=page,
        max=max_results,
        include_original=include_original,
    ))


@app.command("lists")
def lists_command(
    ctx: typer.Context,
    page: Optional[int] = typer.Option(None, "--page"),
    max_results: Optional[int] = typer.Option(None, "--max"),
) -> None:
    """Show all contact lists."""
    _run(ctx, lambda client: client.get_lists(page=page, max=max_results))


@list_app.command("get")
def list_get_command(
    ctx: typer.Context,
    list_id: int = typer.Argument(...),
    members: Optional[MemberSelection] = typer.Option(
        None, "--members", case_sensitive=False, help="Which members to include."
    ),
    page: Optional[int] = typer.Option(None, "--page"),
    max_results: Optional[int] = typer.Option(None, "--max"),
) -> None:
    """Show a list and its members."""
    _run(ctx, lambda client: client.get_list(list_id, members=members, page=page, max=max_results))


@list_app.command("remove")
def list_remove_command(ctx: typer.Context, list_id: int = typer.Argument(...)) -> None:
    """Delete a list and all of its members."""
    _run(ctx, lambda client: client.remove_list(list_id))


@app.command("call")
def call_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Endpoint, e.g. get-balance.json."),
    params: Optional[list[str]] = typer.Argument(None, help="Query parameters as KEY=VALUE."),
) -> None:
    """Call any endpoint with raw query parameters."""
    _run(ctx, lambda client: client.call(path, _parse_pairs(params or [])))


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``burstsms`` console script.

    Errors the commands do not handle themselves are reported on stderr and
    exit with :data:`~burstsms.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from burstsms.output import error

        if isinstance(exc, BurstSMSError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
