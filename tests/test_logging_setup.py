"""Tests for global logging configuration."""
import logging

import pytest
import structlog

from cast_locator.config import LoggingConfig
from cast_locator.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_format_uses_json_renderer():
    configure_logging(LoggingConfig(level="WARNING", format="json"))

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    assert logging.getLogger().level == logging.WARNING


def test_console_format_uses_console_renderer():
    configure_logging(LoggingConfig(level="debug", format="Console"))

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
    assert logging.getLogger().level == logging.DEBUG
