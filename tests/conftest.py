"""Pytest configuration for test isolation.

The package reads its configuration file path and log level from environment
variables (``SPEND_ANALYSIS_CONFIG``, ``SPEND_ANALYSIS_LOG_LEVEL``), and the
CLI additionally loads a ``.env`` from the working directory. A developer's
shell or ``.env`` must not leak into tests, so each test starts with both
variables cleared and runs from its own temporary directory.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPEND_ANALYSIS_CONFIG", raising=False)
    monkeypatch.delenv("SPEND_ANALYSIS_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers the CLI attached so they never outlive a test's streams."""

    yield
    logger = logging.getLogger("spend_analysis")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def write_csv(tmp_path: Path):
    """Return a helper that writes dedented CSV text to a file under ``tmp_path``."""

    def _write(text: str, name: str = "transactions.csv") -> Path:
        p = tmp_path / name
        p.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return p

    return _write
