from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from alert_dispatcher.domain.errors import BackendUnreachable

logger = logging.getLogger(__name__)

QUERY_PATH = "/api/v1/query"
ALERTS_PATH = "/api/v1/alerts"


@dataclass(frozen=True)
class BackendClientConfig:
    """
    Connection settings for the alerting backend.

    Parameters
    ----------
    base_url
        Backend root URL, e.g. ``http://localhost:9090``.
    connect_timeout_s
        Timeout for the liveness query.
    fetch_timeout_s
        Timeout for the alert-listing request.
    """

    base_url: str
    connect_timeout_s: float = 5.0
    fetch_timeout_s: float = 10.0


class BackendClient:
    """
    Poller for a Prometheus-compatible HTTP API.

    Notes
    -----
    - Every request carries a bounded timeout; a hung backend is reported
      the same way as an unreachable one.
    - No retries happen here. The dispatcher's next tick is the retry.
    """

    def __init__(self, cfg: BackendClientConfig):
        self._cfg = cfg
        self._base = cfg.base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base

    def check_connectivity(self) -> bool:
        """
        Query the liveness endpoint (``/api/v1/query?query=up``).

        Returns
        -------
        bool
            True if the backend answered with HTTP 2xx within the timeout.
            The response body is ignored.
        """
        try:
            r = requests.get(
                self._base + QUERY_PATH,
                params={"query": "up"},
                timeout=self._cfg.connect_timeout_s,
            )
        except requests.RequestException as e:
            logger.error("Cannot connect to Prometheus at %s: %s", self._base, e)
            return False

        if not 200 <= r.status_code < 300:
            logger.error("Cannot connect to Prometheus at %s: HTTP %s", self._base, r.status_code)
            return False
        return True

    def fetch_alerts(self) -> str:
        """
        Fetch the raw alert list from ``/api/v1/alerts``.

        Returns
        -------
        str
            Response body. Returned for any HTTP status, because the backend
            describes its own failures in the body (``status: "error"``).

        Raises
        ------
        BackendUnreachable
            On connection failure or timeout.
        """
        url = self._base + ALERTS_PATH
        logger.debug("Fetching alerts from %s", url)
        try:
            r = requests.get(url, timeout=self._cfg.fetch_timeout_s)
        except requests.RequestException as e:
            raise BackendUnreachable(f"Failed to fetch alerts from Prometheus API: {e}") from e
        return r.text
