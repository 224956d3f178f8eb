"""Tests for logging configuration and the creation trace console."""

import json
import logging

from rich.console import Console

from fairness_check_toolkit.config import VerboseConsole
from fairness_check_toolkit.config.logging_config import StructuredFormatter


class TestStructuredFormatter:
    """Test cases for StructuredFormatter."""

    def test_json_with_context(self):
        record = logging.LogRecord(
            "fairness_check.test", logging.INFO, __file__, 10, "done", None, None
        )
        record.component = "fairness_check"
        record.stage = "metric_calculation"
        record.duration = 12.5

        log_data = json.loads(StructuredFormatter().format(record))

        assert log_data["message"] == "done"
        assert log_data["level"] == "INFO"
        assert log_data["component"] == "fairness_check"
        assert log_data["stage"] == "metric_calculation"
        assert log_data["duration_ms"] == 12.5
        assert "model" not in log_data


class TestVerboseConsole:
    """Test cases for VerboseConsole."""

    def test_silent(self, capsys):
        console = VerboseConsole(verbose=False)
        console.write("hidden\n")
        console.alert("hidden\n")

        assert capsys.readouterr().out == ""

    def test_plain_output(self):
        target = Console(record=True, no_color=True, width=200)
        console = VerboseConsole(verbose=True, colorize=False, console=target)

        console.write("-> Fairness objects: ")
        console.ok("compatible [all]\n")

        assert target.export_text() == "-> Fairness objects: compatible [all]\n"
