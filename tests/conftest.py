"""Shared test fixtures for specguard tests."""

import logging
import sys

import pytest


class _StdoutHandler(logging.Handler):
    """A handler that always writes to the *current* sys.stdout.

    Unlike StreamHandler(sys.stdout), this resolves sys.stdout at emit-time
    so it works with pytest's capsys fixture.
    """

    def emit(self, record):
        try:
            msg = self.format(record)
            sys.stdout.write(msg + "\n")
            sys.stdout.flush()
        except Exception:
            self.handleError(record)


@pytest.fixture(autouse=True)
def _setup_logging():
    """Route all specguard loggers to stdout so capsys can capture them."""
    handler = _StdoutHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger("specguard")
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)
    root_logger.propagate = False

    yield

    root_logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep a developer's own specguard.yaml out of the tests."""
    monkeypatch.delenv("SPECGUARD_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
