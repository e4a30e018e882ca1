"""Shared fixtures for stencil tests."""

from __future__ import annotations

import logging

import pytest

from stencil import Template
from stencil.utils.observability.logger import ROOT_LOGGER_NAME


@pytest.fixture
def template() -> Template:
    """A fresh Template with the default types, engines and parsers."""
    return Template()


@pytest.fixture
def log_events(caplog):
    """
    Capture the stencil logger hierarchy at DEBUG.

    Returns a function listing the structured event names logged so far,
    optionally filtered by level.
    """
    caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)

    def collect(level: int | None = None) -> list[str]:
        return [
            record.event
            for record in caplog.records
            if hasattr(record, "event") and (level is None or record.levelno == level)
        ]

    return collect
