"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline, quiet and verbose rules
- JSON / plain rendering of story payloads and tables
- Output file redirection
- The logging bridge (OutputLogHandler, install_log_handler)
"""

from __future__ import annotations

import json
import logging

import pytest

from storyblok_cdn import output as output_module
from storyblok_cdn.output import (
    OutputFormat,
    OutputLogHandler,
    OutputManager,
    _should_disable_color,
    get_output,
    install_log_handler,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("storyblok_cdn.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("storyblok_cdn.output._is_tty", lambda: True)


def _plain(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, **kwargs)


# ------------------------------------------------------------------ #
# Format resolution and colour
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_no_color(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStreams:
    def test_data_goes_to_stdout(self, capfd, non_tty):
        _plain().print_data("cv 1700000000")
        captured = capfd.readouterr()
        assert captured.out == "cv 1700000000\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        getattr(_plain(), method)("message")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "message" in captured.err

    def test_warning_and_error_prefixes(self, capfd, non_tty):
        mgr = _plain()
        mgr.warning("stale cache")
        mgr.error("HTTP 404")
        err = capfd.readouterr().err.splitlines()
        assert err == ["Warning: stale cache", "Error: HTTP 404"]

    def test_suggest_has_arrow(self, capfd, non_tty):
        _plain().suggest("Pass --token")
        assert "→ Pass --token" in capfd.readouterr().err


class TestQuietAndVerbose:
    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        getattr(_plain(quiet=True), method)("hidden")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_keeps(self, capfd, non_tty, method):
        getattr(_plain(quiet=True), method)("shown")
        assert "shown" in capfd.readouterr().err

    def test_debug_hidden_by_default(self, capfd, non_tty):
        _plain().debug("trace")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        mgr = _plain(verbose=True)
        mgr.debug("GET /v1/cdn/stories")
        assert "[debug] GET /v1/cdn/stories" in capfd.readouterr().err
        assert mgr.is_verbose is True


# ------------------------------------------------------------------ #
# Data rendering
# ------------------------------------------------------------------ #


class TestFormatResponse:
    def test_json_is_indented(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response({"full_slug": "home", "id": 1})
        out = capfd.readouterr().out
        assert json.loads(out) == {"full_slug": "home", "id": 1}
        assert "\n  " in out

    def test_json_keeps_unicode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response({"name": "Über uns"})
        assert "Über uns" in capfd.readouterr().out

    def test_plain_dict_as_key_value(self, capfd, non_tty):
        _plain().format_response({"name": "Home", "tag_list": ["a", "b"]})
        lines = capfd.readouterr().out.splitlines()
        assert lines == ["name\tHome", 'tag_list\t["a", "b"]']

    def test_plain_list_flattens(self, capfd, non_tty):
        _plain().format_response([{"id": 1}, {"id": 2}])
        assert capfd.readouterr().out.splitlines() == ["id\t1", "id\t2"]

    def test_rich_produces_output(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.format_response({"slug": "home"})
        assert "slug" in capfd.readouterr().out


class TestPrintTable:
    headers = ["id", "full_slug", "name"]
    rows = [["1", "home", "Home"], ["2", "blog/post", "Post"]]

    def test_plain_mode(self, capfd, non_tty):
        _plain().print_table(self.headers, self.rows)
        lines = capfd.readouterr().out.splitlines()
        assert lines[0] == "id\tfull_slug\tname"
        assert lines[2] == "2\tblog/post\tPost"

    def test_json_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(self.headers, self.rows)
        records = json.loads(capfd.readouterr().out)
        assert records[0] == {"id": "1", "full_slug": "home", "name": "Home"}

    def test_rich_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(self.headers, self.rows, title="Stories")
        out = capfd.readouterr().out
        assert "Stories" in out
        assert "blog/post" in out


class TestOutputFile:
    def test_format_response_writes_to_file(self, tmp_path, capfd, non_tty):
        outfile = tmp_path / "story.json"
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, output_file=str(outfile))
        mgr.format_response({"id": 1})
        assert capfd.readouterr().out == ""
        assert json.loads(outfile.read_text()) == {"id": 1}

    def test_print_data_appends(self, tmp_path, capfd, non_tty):
        outfile = tmp_path / "out.txt"
        mgr = _plain(output_file=str(outfile))
        mgr.print_data("one")
        mgr.print_data("two\n")
        assert outfile.read_text() == "one\ntwo\n"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazy_default(self, non_tty):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_and_convenience_functions(self, capfd, non_tty):
        set_output(_plain())
        output_module.print_data("data")
        output_module.info("note")
        captured = capfd.readouterr()
        assert captured.out == "data\n"
        assert captured.err == "note\n"


# ------------------------------------------------------------------ #
# Logging bridge
# ------------------------------------------------------------------ #


class TestLogHandler:
    def test_warning_routed_to_output(self, capfd, non_tty):
        set_output(_plain())
        install_log_handler()
        logging.getLogger("storyblok_cdn.client.base").warning("No cache version fetched")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "Warning: No cache version fetched" in captured.err

    def test_error_routed_to_output(self, capfd, non_tty):
        set_output(_plain())
        install_log_handler()
        logging.getLogger("storyblok_cdn").error("boom")
        assert "Error: boom" in capfd.readouterr().err

    def test_debug_needs_verbose(self, capfd, non_tty):
        set_output(_plain())
        install_log_handler(verbose=False)
        logging.getLogger("storyblok_cdn.client").debug("GET /v1/cdn/spaces/me")
        assert capfd.readouterr().err == ""

    def test_debug_with_verbose(self, capfd, non_tty):
        set_output(_plain(verbose=True))
        install_log_handler(verbose=True)
        logging.getLogger("storyblok_cdn.client").debug("GET %s", "/v1/cdn/spaces/me")
        assert "[debug] GET /v1/cdn/spaces/me" in capfd.readouterr().err

    def test_reinstall_does_not_duplicate(self, capfd, non_tty):
        set_output(_plain())
        install_log_handler()
        install_log_handler()
        logger = logging.getLogger("storyblok_cdn")
        assert sum(isinstance(h, OutputLogHandler) for h in logger.handlers) == 1
        logger.warning("once")
        assert capfd.readouterr().err.count("once") == 1

    def test_stops_propagation(self, non_tty):
        install_log_handler()
        assert logging.getLogger("storyblok_cdn").propagate is False
