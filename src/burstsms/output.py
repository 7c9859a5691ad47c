"""Rendering of Burst SMS responses and CLI diagnostics.

Response bodies go to stdout and nothing else does, so that
``burstsms --json ... | jq`` works. Diagnostics go to stderr.

Burst SMS replies share one shape: top-level scalars (``balance``,
``message_id``, ...), zero or more lists of records (``lists``,
``members``, ``recipients``, ...), a ``page`` object on paged endpoints,
and an ``error`` envelope that reads ``{"code": "SUCCESS", ...}`` on a
successful call. The renderers use that shape:

* **json** -- the body exactly as received, indented, ``error`` envelope
  included.
* **plain** -- ``key<TAB>value`` lines for scalars, then each record list
  as a header row plus one tab-separated row per record. The ``SUCCESS``
  envelope is dropped.
* **rich** -- a key/value grid and one :class:`~rich.table.Table` per
  record list; nested objects are shown as highlighted JSON.

``AUTO`` picks rich on a colour TTY and plain otherwise. ``NO_COLOR`` and
``TERM=dumb`` are honoured.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.json import JSON
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from burstsms.models import ErrorClassification

SUCCESS_CODE = "SUCCESS"


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def split_envelope(data: Any) -> tuple[Any, Optional[dict[str, Any]]]:
    """Separate a ``SUCCESS`` status envelope from a response body.

    Returns:
        ``(body, envelope)``. The envelope is ``None`` and *data* is
        returned unchanged unless *data* is a dict whose ``error.code`` is
        ``SUCCESS``.
    """
    if not isinstance(data, dict):
        return data, None
    envelope = data.get("error")
    if not isinstance(envelope, dict) or envelope.get("code") != SUCCESS_CODE:
        return data, None
    return {k: v for k, v in data.items() if k != "error"}, envelope


def _is_record_list(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(v, dict) for v in value)


def _columns(records: list[dict[str, Any]]) -> list[str]:
    """Union of the record keys, in first-seen order."""
    columns: dict[str, None] = {}
    for record in records:
        columns.update(dict.fromkeys(record))
    return list(columns)


def _plain_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


class OutputManager:
    """Writes response bodies to stdout and diagnostics to stderr.

    Args:
        format: Output format; ``AUTO`` resolves from TTY detection.
        no_color: Disable colour and Rich markup.
        quiet: Suppress success messages and suggestions.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # Response bodies (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Render a decoded response body in the active format."""
        if self._format == OutputFormat.JSON:
            # A str here is a non-JSON body, passed through untouched.
            if isinstance(data, str):
                self._emit(data)
            else:
                self._emit(json.dumps(data, indent=2, ensure_ascii=False, default=str))
            return

        body, envelope = split_envelope(data)
        if envelope is not None:
            self.debug(f"{envelope.get('code')}: {envelope.get('description')}")
        if self._format == OutputFormat.PLAIN:
            self._print_plain(body)
        else:
            self._print_rich(body)

    def _print_plain(self, data: Any) -> None:
        if isinstance(data, dict):
            lists = {k: v for k, v in data.items() if _is_record_list(v)}
            for key, value in data.items():
                if key not in lists:
                    self._emit(f"{key}\t{_plain_value(value)}")
            for key, records in lists.items():
                self._emit("")
                self._emit(key)
                self._print_plain_rows(records)
        elif _is_record_list(data):
            self._print_plain_rows(data)
        elif isinstance(data, list):
            for item in data:
                self._emit(_plain_value(item))
        else:
            self._emit(_plain_value(data))

    def _print_plain_rows(self, records: list[dict[str, Any]]) -> None:
        columns = _columns(records)
        self._emit("\t".join(columns))
        for record in records:
            self._emit("\t".join(_plain_value(record.get(c)) for c in columns))

    def _print_rich(self, data: Any) -> None:
        if isinstance(data, dict):
            lists = {k: v for k, v in data.items() if _is_record_list(v)}
            grid = Table.grid(padding=(0, 2))
            grid.add_column(style="bold")
            grid.add_column()
            for key, value in data.items():
                if key not in lists:
                    grid.add_row(Text(key), _rich_cell(value))
            if grid.row_count:
                self._stdout.print(grid)
            for key, records in lists.items():
                self._stdout.print(_record_table(records, title=key))
        elif _is_record_list(data):
            self._stdout.print(_record_table(data))
        elif isinstance(data, list):
            self._stdout.print(JSON.from_data(data, ensure_ascii=False, default=str))
        else:
            self._stdout.print(Text(str(data)))

    def _emit(self, line: str) -> None:
        print(line, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def api_error(self, error: ErrorClassification) -> None:
        """Report a classified API failure. Never suppressed."""
        if self._no_color:
            print(
                f"Error: {error.kind.value} (HTTP {error.http_status}): {error.description}",
                file=sys.stderr,
                flush=True,
            )
        else:
            self._stderr.print(
                f"[bold red]Error:[/bold red] [red]{error.kind.value}[/red] "
                f"[dim](HTTP {error.http_status})[/dim]: {escape(error.description)}"
            )

    def error(self, message: str) -> None:
        """Print an error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def success(self, message: str) -> None:
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[green]{escape(message)}[/green]")

    def suggest(self, message: str) -> None:
        """Print a next-step hint to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            formatted = f"→ {message}"
            if self._no_color:
                print(formatted, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]{escape(formatted)}[/dim]")

    def debug(self, message: str) -> None:
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]\\[debug] {escape(message)}[/dim]")


def _rich_cell(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return JSON.from_data(value, ensure_ascii=False, default=str)
    return Text(_plain_value(value))


def _record_table(records: list[dict[str, Any]], title: Optional[str] = None) -> Table:
    columns = _columns(records)
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for column in columns:
        table.add_column(column)
    for record in records:
        table.add_row(*(Text(_plain_value(record.get(c))) for c in columns))
    return table


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance, installed by the CLI callback
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def api_error(error: ErrorClassification) -> None:
    get_output().api_error(error)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
