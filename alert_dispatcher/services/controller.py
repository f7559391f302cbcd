from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from alert_dispatcher.core.classifier import classify
from alert_dispatcher.core.reporter import AlertReporter
from alert_dispatcher.domain.errors import BackendUnreachable, MalformedResponse
from alert_dispatcher.domain.models import CycleSummary
from alert_dispatcher.notification.forwarder import AlertForwarder
from alert_dispatcher.transport.alerts_codec import decode_alerts, validate_payload
from alert_dispatcher.transport.backend_client import BackendClient

logger = logging.getLogger(__name__)


@dataclass
class DispatchController:
    """
    Run one dispatch cycle: Rotate -> Fetch -> Validate -> Classify -> Emit(+Notify).

    Responsibilities
    ----------------
    - Rotate the log file before anything is written in the cycle.
    - Fetch and validate the backend's alert list.
    - Emit one line per alert, forwarding firing alerts when a forwarder
      is configured.
    - Emit the summary line after every alert line.

    Notes
    -----
    Transient failures (unreachable backend, malformed payload) are logged
    and end the cycle early without a summary. Nothing is raised to the
    caller, so a continuous loop keeps running.

    Parameters
    ----------
    client
        Backend poller.
    reporter
        Log emission and rotation.
    forwarder
        Webhook forwarder, or None when no webhook URL is configured.
    """

    client: BackendClient
    reporter: AlertReporter
    forwarder: Optional[AlertForwarder] = None

    def run_cycle(self) -> Optional[CycleSummary]:
        """
        Execute one cycle.

        Returns
        -------
        CycleSummary or None
            The cycle's counts, or None if the cycle was aborted.
        """
        self.reporter.rotate_if_needed()
        logger.debug("Checking for alerts...")

        try:
            raw = self.client.fetch_alerts()
            items = validate_payload(raw)
        except BackendUnreachable as e:
            logger.error("Failed to fetch alerts: %s", e)
            return None
        except MalformedResponse as e:
            logger.error("%s", e)
            return None

        alerts = decode_alerts(items)
        unforwarded = 0
        for alert in alerts:
            self.reporter.emit_alert(alert)
            if not alert.is_firing:
                continue
            if self.forwarder is not None:
                self.forwarder.forward(alert)
            else:
                unforwarded += 1

        if unforwarded:
            logger.debug("Webhook not configured; %d firing alert(s) not forwarded", unforwarded)

        summary = classify(alerts)
        self.reporter.emit_summary(summary)
        return summary
