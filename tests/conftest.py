# tests/conftest.py
"""Shared fixtures for the statedump test-suite."""

import logging
from typing import Any, List, Tuple

import pytest

from statedump.config import FormatConfig
from statedump.errors import ErrorReporter
from statedump.introspection import PythonIntrospectionProvider
from statedump.render import ValueRenderer


class CollectingSink:
    """OutputSink that records every emitted block."""

    def __init__(self):
        self.emitted: List[Tuple[str, Any]] = []

    def emit(self, text, context=None):
        self.emitted.append((text, context))

    @property
    def texts(self):
        return [t for t, _ in self.emitted]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("STATEDUMP_COLOR", "STATEDUMP_MAX_LINE", "STATEDUMP_BOUNDARY_MODULES"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _reset_statedump_logger():
    # the CLI attaches a stderr handler bound to the capture stream of its test
    log = logging.getLogger("statedump")
    handlers, level = list(log.handlers), log.level
    yield
    log.handlers[:] = handlers
    log.setLevel(level)


@pytest.fixture
def config():
    return FormatConfig(colorize=False)


@pytest.fixture
def renderer(config):
    return ValueRenderer(config)


@pytest.fixture
def provider():
    return PythonIntrospectionProvider()


@pytest.fixture
def reporter():
    return ErrorReporter()


@pytest.fixture
def sink():
    return CollectingSink()
