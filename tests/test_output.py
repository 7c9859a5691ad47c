"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- SUCCESS envelope handling and record-list tables
- Global instance management and convenience functions
"""

from __future__ import annotations

import json

import pytest

from burstsms import output as output_module
from burstsms.models import ErrorClassification, ResponseCode
from burstsms.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
    split_envelope,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("burstsms.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("burstsms.output._is_tty", lambda: True)


OK = {"code": "SUCCESS", "description": "OK"}
BALANCE = {"balance": 1021.5, "currency": "AUD", "error": OK}
LISTS = {
    "lists": [
        {"id": 55, "name": "Customers", "members_active": 120},
        {"id": 56, "name": "Staff", "members_active": 8, "auto_delete": True},
    ],
    "lists_total": 2,
    "page": {"count": 1, "number": 1},
    "error": OK,
}
NOT_FOUND = ErrorClassification(
    kind=ResponseCode.NOT_FOUND, description="No such list", http_status=404
)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False

    def test_no_color_env_forces_plain_on_tty(self, tty, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        assert OutputManager().format == OutputFormat.PLAIN


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    @pytest.mark.parametrize("method", ["success", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("list 42 not found")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "list 42 not found" in captured.err

    def test_response_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response(BALANCE)
        captured = capfd.readouterr()
        assert json.loads(captured.out) == BALANCE
        assert captured.err == ""

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(no_color=True).error("No username configured")
        assert capfd.readouterr().err.strip() == "Error: No username configured"

    def test_suggest_has_arrow(self, capfd, non_tty):
        OutputManager(no_color=True).suggest("Run 'burstsms configure'")
        assert "→ Run 'burstsms configure'" in capfd.readouterr().err


class TestApiError:
    def test_plain_line(self, capfd, non_tty):
        OutputManager(no_color=True).api_error(NOT_FOUND)
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err.strip() == "Error: NOT_FOUND (HTTP 404): No such list"

    def test_colored_keeps_brackets_in_description(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        error = ErrorClassification(
            kind=ResponseCode.FIELD_INVALID, description="to [0] is invalid", http_status=400
        )
        OutputManager().api_error(error)
        err = capfd.readouterr().err
        assert "FIELD_INVALID" in err
        assert "HTTP 400" in err
        assert "to [0] is invalid" in err

    def test_not_suppressed_by_quiet(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).api_error(NOT_FOUND)
        assert "NOT_FOUND" in capfd.readouterr().err


class TestQuietAndVerbose:
    def test_quiet_suppresses_success_and_suggest(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.success("done")
        mgr.suggest("next")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_errors(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).error("broken")
        assert "Error: broken" in capfd.readouterr().err

    def test_quiet_keeps_response_data(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True).format_response("ok")
        assert capfd.readouterr().out.strip() == "ok"

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(no_color=True).debug("hidden")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        OutputManager(no_color=True, verbose=True).debug("shown")
        assert "[debug] shown" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# SUCCESS envelope
# ------------------------------------------------------------------ #


class TestSplitEnvelope:
    def test_success_envelope_is_removed(self):
        body, envelope = split_envelope(BALANCE)
        assert body == {"balance": 1021.5, "currency": "AUD"}
        assert envelope == OK
        assert "error" in BALANCE

    def test_other_codes_are_left_in_place(self):
        data = {"error": {"code": "KEY_EXISTS", "description": "dup"}}
        assert split_envelope(data) == (data, None)

    def test_non_dict_error_is_left_in_place(self):
        data = {"error": "SUCCESS"}
        assert split_envelope(data) == (data, None)

    @pytest.mark.parametrize("data", ["OK", [1, 2], None, {}])
    def test_bodies_without_envelope(self, data):
        assert split_envelope(data) == (data, None)


# ------------------------------------------------------------------ #
# Rendering
# ------------------------------------------------------------------ #


class TestJsonFormat:
    def test_dict_is_indented(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"list_id": 5})
        assert capfd.readouterr().out == '{\n  "list_id": 5\n}\n'

    def test_envelope_is_kept(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response(LISTS)
        assert json.loads(capfd.readouterr().out)["error"] == OK

    def test_text_body_is_printed_as_is(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response("OK")
        assert capfd.readouterr().out == "OK\n"

    def test_unicode_is_not_escaped(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"message": "Grüße"})
        assert "Grüße" in capfd.readouterr().out


class TestPlainFormat:
    def test_scalars_as_key_value_without_envelope(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(BALANCE)
        assert capfd.readouterr().out.strip().split("\n") == [
            "balance\t1021.5",
            "currency\tAUD",
        ]

    def test_envelope_is_reported_under_verbose(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.format_response(BALANCE)
        captured = capfd.readouterr()
        assert "[debug] SUCCESS: OK" in captured.err
        assert "SUCCESS" not in captured.out

    def test_failure_envelope_is_printed(self, capfd, non_tty):
        data = {"error": {"code": "LEDGER_ERROR", "description": "x"}}
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(data)
        assert "LEDGER_ERROR" in capfd.readouterr().out

    def test_record_list_as_table(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(LISTS)
        assert capfd.readouterr().out.split("\n") == [
            "lists_total\t2",
            'page\t{"count": 1, "number": 1}',
            "",
            "lists",
            "id\tname\tmembers_active\tauto_delete",
            "55\tCustomers\t120\t",
            "56\tStaff\t8\ttrue",
            "",
        ]

    def test_top_level_record_list(self, capfd, non_tty):
        data = [{"id": 1, "name": "Customers"}, {"id": 2, "name": "Staff"}]
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(data)
        assert capfd.readouterr().out.strip().split("\n") == [
            "id\tname",
            "1\tCustomers",
            "2\tStaff",
        ]

    def test_empty_list_stays_a_scalar_line(self, capfd, non_tty):
        data = {"members": [], "error": OK}
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(data)
        assert capfd.readouterr().out == "members\t[]\n"

    def test_list_of_primitives(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(["a", "b"])
        assert capfd.readouterr().out.strip().split("\n") == ["a", "b"]

    def test_none_and_bool(self, capfd, non_tty):
        data = {"reference": None, "active": False}
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(data)
        assert capfd.readouterr().out == "reference\t\nactive\tfalse\n"


class TestRichFormat:
    def test_scalars_without_envelope(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response(BALANCE)
        out = capfd.readouterr().out
        assert "currency" in out
        assert "AUD" in out
        assert "SUCCESS" not in out

    def test_record_list_as_titled_table(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response(LISTS)
        out = capfd.readouterr().out
        assert "lists" in out
        assert "Customers" in out
        assert "Staff" in out
        assert "members_active" in out

    def test_markup_in_values_is_literal(self, capfd, non_tty):
        data = {"message": "[bold]hi[/bold]"}
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response(data)
        assert "[bold]hi[/bold]" in capfd.readouterr().out

    def test_plain_string(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response("just text")
        assert "just text" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)

    def test_set_output_overrides(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr

    def test_reset_output_clears(self):
        set_output(OutputManager(format=OutputFormat.JSON))
        reset_output()
        assert output_module._output is None


class TestConvenienceFunctions:
    def test_format_response(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.JSON))
        output_module.format_response({"ok": True})
        assert json.loads(capfd.readouterr().out) == {"ok": True}

    @pytest.mark.parametrize("name", ["error", "success", "suggest"])
    def test_diagnostics_delegate(self, capfd, non_tty, name):
        set_output(OutputManager(no_color=True))
        getattr(output_module, name)("delegated")
        assert "delegated" in capfd.readouterr().err

    def test_api_error_delegates(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.api_error(NOT_FOUND)
        assert "NOT_FOUND (HTTP 404)" in capfd.readouterr().err

    def test_debug_delegates(self, capfd, non_tty):
        set_output(OutputManager(no_color=True, verbose=True))
        output_module.debug("delegated")
        assert "[debug] delegated" in capfd.readouterr().err
