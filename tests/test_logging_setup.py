import io
import json
import logging

import pytest

from spend_analysis.logging_setup import (
    LEVEL_ENV_VAR,
    LogFormat,
    configure_logging,
    get_logger,
    resolve_level,
)


def test_resolve_level_precedence(monkeypatch):
    monkeypatch.setenv(LEVEL_ENV_VAR, "ERROR")

    assert resolve_level() == logging.ERROR
    assert resolve_level(verbose=1) == logging.DEBUG
    assert resolve_level("warning", verbose=2) == logging.WARNING
    assert resolve_level(15) == 15


def test_resolve_level_defaults_to_info(monkeypatch):
    assert resolve_level() == logging.INFO
    monkeypatch.setenv(LEVEL_ENV_VAR, "chatty")
    assert resolve_level() == logging.INFO


def test_resolve_level_rejects_unknown_explicit_name():
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_text_format_writes_plain_lines():
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)

    get_logger("spend_analysis.tests").info("loaded %d rows", 3)
    get_logger("spend_analysis.tests").debug("not shown")

    out = stream.getvalue()
    assert "INFO" in out
    assert "spend_analysis.tests: loaded 3 rows" in out
    assert "not shown" not in out


def test_json_format_writes_one_object_per_line():
    stream = io.StringIO()
    configure_logging("DEBUG", log_format=LogFormat.JSON, stream=stream)

    log = get_logger("spend_analysis.tests")
    log.debug("first")
    log.warning("second")

    entries = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert [e["message"] for e in entries] == ["first", "second"]
    assert entries[1]["level"] == "WARNING"
    assert entries[1]["logger"] == "spend_analysis.tests"


def test_reconfiguring_replaces_the_handler():
    first, second = io.StringIO(), io.StringIO()
    configure_logging("INFO", stream=first)
    configure_logging("INFO", log_format="json", stream=second)

    get_logger("spend_analysis.tests").info("once")

    assert first.getvalue() == ""
    assert len(second.getvalue().splitlines()) == 1
    assert len(logging.getLogger("spend_analysis").handlers) == 1
