"""
Tests for the command line entry point.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from antipattern_insights import cli


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("antipattern_insights.cli.configure_logging") as configure:
        yield configure


@pytest.fixture
def patched_client(test_config, fake_specs):
    """CLI client and registry replaced by the fake detectors."""
    with patch("antipattern_insights.cli.AntiPatternClient") as client_cls, \
         patch("antipattern_insights.cli.build_detector_specs", return_value=fake_specs):
        yield client_cls.return_value.__enter__.return_value


class TestParser:
    """Tests for argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_unknown_chart_kind(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["chart", "pie"])

    def test_chart_filters(self):
        args = cli.build_parser().parse_args(
            ["chart", "trend-over-time", "--service", "a", "--service", "b", "--pattern", "Knot Pattern"]
        )
        assert args.service == ["a", "b"]
        assert args.pattern == ["Knot Pattern"]


class TestCommands:
    """Tests for command execution."""

    def test_refresh_json(self, patched_client, capsys):
        assert cli.main(["refresh", "--json"]) == 0
        body = json.loads(capsys.readouterr().out)
        assert len(body["insights"]) == 11
        assert body["failed_detectors"] == []

    def test_refresh_summary(self, patched_client, capsys):
        assert cli.main(["refresh"]) == 0
        out = capsys.readouterr().out
        assert "Insights: 11" in out
        assert "Bottleneck Services" in out

    def test_chart(self, patched_client, capsys):
        assert cli.main(["chart", "pattern-distribution", "--service", "gateway"]) == 0
        body = json.loads(capsys.readouterr().out)
        assert body["labels"] == ["Long Service Chains", "Fan-Out Overload"]

    def test_report(self, patched_client, aggregate_payload, capsys):
        patched_client.fetch_all.return_value = aggregate_payload
        assert cli.main(["report"]) == 0
        out = capsys.readouterr().out
        assert "Cyclic Dependencies" in out
        assert "a → b → a" in out

    def test_report_unavailable(self, patched_client, capsys):
        patched_client.fetch_all.return_value = None
        assert cli.main(["report"]) == 1

    def test_serve(self, test_config):
        with patch("uvicorn.run") as run, \
             patch("antipattern_insights.api.app.create_app", return_value=MagicMock()) as factory:
            assert cli.main(["serve", "--port", "9001", "--no-refresh"]) == 0
        factory.assert_called_once_with(config=test_config, refresh_on_startup=False, access_log=True)
        assert run.call_args.kwargs["port"] == 9001
        assert run.call_args.kwargs["host"] == "127.0.0.1"

    def test_log_format_flags(self, patched_client, quiet_logging):
        assert cli.main(["-v", "--log-json", "refresh"]) == 0
        quiet_logging.assert_called_once_with(level=logging.WARNING, verbose=True, json_format=True)
