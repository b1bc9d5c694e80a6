"""Tests for the output formatting system.

Covers format resolution, colour disabling, the stdout/stderr split,
quiet and verbose modes, tables and results in each format, the global
instance, and the Rich log handler installed by ``configure_logging``.
"""

from __future__ import annotations

import json
import logging

import pytest

from discogen import output as output_module
from discogen.output import (
    LOGGER_NAME,
    OutputFormat,
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("discogen.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("discogen.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)


# ------------------------------------------------------------------ #
# Format resolution and colour
# ------------------------------------------------------------------ #


class TestFormatResolution:
    def test_auto_is_plain_when_piped(self, non_tty: None) -> None:
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_is_rich_on_tty(self, tty: None) -> None:
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_is_plain_without_colour(self, tty: None) -> None:
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_format_wins(self, tty: None) -> None:
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColourDisabling:
    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_enabled_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStreams:
    def test_data_goes_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN).print_data("gen/tasks/v1")
        captured = capsys.readouterr()
        assert captured.out == "gen/tasks/v1\n"
        assert captured.err == ""

    def test_diagnostics_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        out = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        out.info("fetching")
        out.warning("nested resources skipped")
        out.error("boom")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "fetching\nWarning: nested resources skipped\nError: boom\n"

    def test_quiet_suppresses_info_not_errors(self, capsys: pytest.CaptureFixture[str]) -> None:
        out = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        out.info("hidden")
        out.success("hidden too")
        out.error("shown")
        assert capsys.readouterr().err == "Error: shown\n"

    def test_long_errors_stay_on_one_line(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        message = "No API with id 'drive:v3'. Available: " + ", ".join(
            f"api{i}:v1" for i in range(30)
        )
        OutputManager(format=OutputFormat.PLAIN).error(message)
        assert capsys.readouterr().err == f"Error: {message}\n"

    def test_debug_requires_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("quiet")
        OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True).debug("loud")
        assert capsys.readouterr().err == "[debug] loud\n"

    def test_progress_only_on_tty(self, non_tty: None, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN, no_color=True).progress("1/3")
        assert capsys.readouterr().err == ""


# ------------------------------------------------------------------ #
# Tables and results
# ------------------------------------------------------------------ #


class TestPrintTable:
    HEADERS = ["ID", "Title"]
    ROWS = [["tasks:v1", "Tasks API"], ["drive:v3", "Drive API"]]

    def test_plain(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN).print_table(self.HEADERS, self.ROWS)
        assert capsys.readouterr().out.splitlines() == [
            "ID\tTitle",
            "tasks:v1\tTasks API",
            "drive:v3\tDrive API",
        ]

    def test_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.JSON).print_table(self.HEADERS, self.ROWS)
        assert json.loads(capsys.readouterr().out) == [
            {"ID": "tasks:v1", "Title": "Tasks API"},
            {"ID": "drive:v3", "Title": "Drive API"},
        ]

    def test_rich(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            self.HEADERS, self.ROWS, title="APIs"
        )
        out = capsys.readouterr().out
        assert "APIs" in out
        assert "tasks:v1" in out


class TestPrintResult:
    def test_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.JSON).print_result({"gendir": "gen", "jobs": 2})
        assert json.loads(capsys.readouterr().out) == {"gendir": "gen", "jobs": 2}

    def test_plain_dict(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN).print_result({"gendir": "gen", "jobs": 2})
        assert capsys.readouterr().out == "gendir\tgen\njobs\t2\n"

    def test_plain_list(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN).print_result([{"a": 1, "b": 2}, "x"])
        assert capsys.readouterr().out == "1\t2\nx\n"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazy_default(self) -> None:
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_module_helpers(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.print_data("data")
        output_module.warning("careful")
        captured = capsys.readouterr()
        assert captured.out == "data\n"
        assert captured.err == "Warning: careful\n"


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


class TestConfigureLogging:
    def _handlers(self) -> list[logging.Handler]:
        return [
            h for h in logging.getLogger(LOGGER_NAME).handlers if getattr(h, "_discogen", False)
        ]

    def test_warning_level_by_default(self) -> None:
        configure_logging(OutputManager(format=OutputFormat.PLAIN))
        assert logging.getLogger(LOGGER_NAME).level == logging.WARNING
        assert len(self._handlers()) == 1

    def test_debug_level_when_verbose(self) -> None:
        configure_logging(OutputManager(format=OutputFormat.PLAIN, verbose=True))
        assert logging.getLogger(LOGGER_NAME).level == logging.DEBUG

    def test_reconfiguring_replaces_handler(self) -> None:
        configure_logging(OutputManager(format=OutputFormat.PLAIN))
        configure_logging(OutputManager(format=OutputFormat.PLAIN, verbose=True))
        assert len(self._handlers()) == 1

    def test_records_reach_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        logging.getLogger("discogen.generator.methods").warning("nested resource skipped")
        assert "nested resource skipped" in capsys.readouterr().err
