"""
Tests for the forge fmt collaborator.
"""

import logging
import subprocess

from branchtree.formatting import format_source


def test_formatted_output_is_returned(monkeypatch):
    """Successful formatting returns the formatter's output."""
    calls = []

    def fake_run(args, **kwargs):
        calls.append((args, kwargs["input"]))
        return subprocess.CompletedProcess(args, 0, stdout="formatted\n", stderr="")

    monkeypatch.setattr("branchtree.formatting.subprocess.run", fake_run)

    assert format_source("raw\n") == "formatted\n"
    assert calls == [(["forge", "fmt", "--raw", "-"], "raw\n")]


def test_missing_formatter_keeps_input(monkeypatch, caplog):
    """Without forge the code is returned unchanged with a warning."""

    def fake_run(*args, **kwargs):
        raise FileNotFoundError("forge")

    monkeypatch.setattr("branchtree.formatting.subprocess.run", fake_run)

    with caplog.at_level(logging.WARNING, logger="branchtree.formatting"):
        assert format_source("raw\n") == "raw\n"

    assert "was not found" in caplog.text


def test_failing_formatter_keeps_input(monkeypatch, caplog):
    """A formatter error keeps the unformatted code."""
    monkeypatch.setattr(
        "branchtree.formatting.subprocess.run",
        lambda args, **kwargs: subprocess.CompletedProcess(args, 1, stdout="", stderr="parse error"),
    )

    with caplog.at_level(logging.WARNING, logger="branchtree.formatting"):
        assert format_source("raw\n") == "raw\n"

    assert "parse error" in caplog.text
