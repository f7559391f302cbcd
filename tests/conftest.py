"""
Shared fixtures for the Alert Dispatcher tests.

The package logger is reset after every test so that a test which installs
real handlers via ``setup_logging`` cannot hide records from ``caplog`` in
later tests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import pytest

from alert_dispatcher.logging_config import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def make_alert_obj(
    name: str = "HighCPU",
    state: Optional[str] = "firing",
    severity: str = "critical",
    instance: str = "node-1:9100",
    active_at: Optional[str] = "2026-01-01T10:00:00Z",
    summary: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Build one alert object in the backend's wire shape."""
    obj: Dict[str, Any] = {
        "labels": {"alertname": name, "severity": severity, "instance": instance},
        "annotations": {},
    }
    if state is not None:
        obj["state"] = state
    if active_at is not None:
        obj["activeAt"] = active_at
    if summary is not None:
        obj["annotations"]["summary"] = summary
    if description is not None:
        obj["annotations"]["description"] = description
    return obj


@pytest.fixture
def alert_obj():
    return make_alert_obj
