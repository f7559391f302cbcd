"""
Alert reporter.

Turns decoded alerts and cycle summaries into log lines and drives log file
rotation at the cycle boundary.

The log level of an alert line is chosen from the alert's *state*, not from
its own ``severity`` label:

- firing  -> ERROR
- pending -> WARNING
- anything else (inactive, unknown) -> INFO
"""

from __future__ import annotations

import logging
from typing import Optional

from alert_dispatcher.domain.models import Alert, AlertState, CycleSummary
from alert_dispatcher.logging_config import CycleRotatingFileHandler

logger = logging.getLogger(__name__)

_STATE_LEVELS = {
    AlertState.FIRING: logging.ERROR,
    AlertState.PENDING: logging.WARNING,
}


def format_alert(alert: Alert) -> str:
    """
    Render one alert as a single pipe-separated line.

    Optional parts (summary, description, active-since) are appended only
    when present.
    """
    parts = [
        f"ALERT: {alert.name}",
        f"State: {alert.state.value}",
        f"Severity: {alert.severity}",
        f"Instance: {alert.instance}",
    ]
    if alert.summary:
        parts.append(f"Summary: {alert.summary}")
    if alert.description:
        parts.append(f"Description: {alert.description}")
    if alert.active_since:
        parts.append(f"Active Since: {alert.active_since}")
    return " | ".join(parts)


def format_summary(summary: CycleSummary) -> str:
    text = (
        f"Processed {summary.total} alert(s): {summary.firing} firing, "
        f"{summary.pending} pending, {summary.resolved} resolved"
    )
    if summary.unknown:
        text += f", {summary.unknown} unknown"
    return text


class AlertReporter:
    """
    Structured log emission for a dispatch cycle.

    Parameters
    ----------
    file_sink
        The rotating file handler installed by
        :func:`~alert_dispatcher.logging_config.setup_logging`. When None,
        rotation is a no-op (console-only logging).
    """

    def __init__(self, file_sink: Optional[CycleRotatingFileHandler] = None):
        self._file_sink = file_sink

    def rotate_if_needed(self) -> bool:
        """
        Rotate the log file if it grew past its threshold.

        Must run before anything else is logged in the cycle. When a rotation
        happens, the notice is the first line of the new file. A failed
        rotation is logged and the cycle keeps writing to the current file.
        """
        if self._file_sink is None:
            return False
        try:
            rotated = self._file_sink.rotate_if_needed()
        except OSError as e:
            logger.error("Log file rotation failed: %s", e)
            return False
        if rotated:
            logger.info("Log file rotated due to size limit")
        return rotated

    def emit_alert(self, alert: Alert) -> None:
        level = _STATE_LEVELS.get(alert.state, logging.INFO)
        logger.log(level, format_alert(alert))

    def emit_summary(self, summary: CycleSummary) -> None:
        if summary.total == 0:
            logger.info("No alerts found")
            return
        logger.info(format_summary(summary))
