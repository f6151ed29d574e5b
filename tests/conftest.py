"""Shared pytest fixtures for konfbind tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
from click.testing import CliRunner

from konfbind.binding.binder import Binder
from konfbind.config.models import StoreConfig
from konfbind.store import Store


def _konfbind_loggers() -> list[str]:
    names = [n for n in logging.root.manager.loggerDict if n.startswith("konfbind.")]
    return ["konfbind", *names]


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root and ``konfbind.*`` logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    levels = {name: logging.getLogger(name).level for name in _konfbind_loggers()}
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    for name in _konfbind_loggers():
        logging.getLogger(name).setLevel(levels.get(name, logging.NOTSET))


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def binder() -> Binder:
    """A fresh, unbound binder."""
    return Binder()


@pytest.fixture
def store() -> Store:
    """A fresh store named ``test``."""
    return Store(StoreConfig(name="test"))


@pytest.fixture
def debug_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """caplog with ``konfbind`` loggers at DEBUG."""
    caplog.set_level(logging.DEBUG, logger="konfbind")
    return caplog
