from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from alert_dispatcher.domain.errors import NotificationDeliveryFailure
from alert_dispatcher.domain.models import Alert
from alert_dispatcher.notification.base import NotificationEvent, Notifier
from alert_dispatcher.notification.payload import build_alert_webhook_payload

logger = logging.getLogger(__name__)


class AlertForwarder:
    """
    Best-effort forwarding of firing alerts to one notifier.

    Each call makes exactly one delivery attempt. A failure is logged as a
    warning and reported through the return value; it never raises, so one
    bad delivery cannot abort the cycle or affect later alerts.

    Parameters
    ----------
    notifier
        Delivery backend (usually a ``WebhookNotifier``).
    destination
        Human-readable destination used in log lines.
    clock
        Returns the envelope timestamp. Injected by tests.
    """

    def __init__(
        self,
        notifier: Notifier,
        destination: str,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._notifier = notifier
        self._destination = destination
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def forward(self, alert: Alert) -> bool:
        """
        Deliver one alert.

        Returns
        -------
        bool
            True if the notifier accepted the event.
        """
        event = NotificationEvent(
            kind="alert_firing",
            alert_name=alert.name,
            payload=build_alert_webhook_payload(alert, now=self._clock()),
        )
        try:
            self._notifier.notify(event)
        except NotificationDeliveryFailure as e:
            logger.warning("Failed to send webhook to %s: %s", self._destination, e)
            return False

        logger.debug("Webhook sent successfully for %s", event.alert_name)
        return True
