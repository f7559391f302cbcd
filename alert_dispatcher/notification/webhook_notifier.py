from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from alert_dispatcher.domain.errors import NotificationDeliveryFailure
from alert_dispatcher.notification.base import NotificationEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookConfig:
    """
    Configuration for webhook-based notifications.

    Parameters
    ----------
    url
        Target webhook URL.
    timeout_s
        HTTP request timeout in seconds.
    verify_tls
        Whether to verify TLS certificates.
    auth_header
        Optional Authorization header value (e.g., Bearer token).
    """

    url: str
    timeout_s: float = 10.0
    verify_tls: bool = True
    auth_header: Optional[str] = None


class WebhookNotifier:
    """
    Notification sender that delivers events via a single HTTP POST.

    Notes
    -----
    - This class performs side effects (network I/O).
    - There is no retry. Transport errors and non-2xx responses are raised
      as ``NotificationDeliveryFailure``.
    """

    def __init__(self, cfg: WebhookConfig):
        self._cfg = cfg

    def notify(self, event: NotificationEvent) -> None:
        """
        Send a notification event to the configured webhook endpoint.

        Parameters
        ----------
        event
            Notification event whose payload will be sent as JSON.

        Raises
        ------
        NotificationDeliveryFailure
            If the request fails or the response status indicates an error.
        """
        headers = {"Content-Type": "application/json"}
        if self._cfg.auth_header:
            headers["Authorization"] = self._cfg.auth_header

        logger.debug("POST %s event=%s alert=%s", self._cfg.url, event.kind, event.alert_name)
        try:
            r = requests.post(
                self._cfg.url,
                json=event.payload,
                headers=headers,
                timeout=self._cfg.timeout_s,
                verify=self._cfg.verify_tls,
            )
            r.raise_for_status()
        except requests.RequestException as e:
            raise NotificationDeliveryFailure(str(e)) from e
