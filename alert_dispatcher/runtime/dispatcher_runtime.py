from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from alert_dispatcher.config.dispatcher_config import RunMode
from alert_dispatcher.services.controller import DispatchController
from alert_dispatcher.transport.backend_client import BackendClient

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class DispatcherRuntimeConfig:
    """
    Lifecycle settings for the dispatcher loop.

    Parameters
    ----------
    mode
        Loop forever, run once, or only test connectivity.
    interval_s
        Sleep between cycles in loop mode.
    wait_unit_s
        Longest single wait on the stop event while sleeping. Bounds how
        long a shutdown request can go unnoticed.
    """

    mode: RunMode = RunMode.LOOP
    interval_s: float = 30.0
    wait_unit_s: float = 1.0


class DispatcherRuntime:
    """
    Lifecycle driver: ConnectivityGate -> {TestExit | SingleShot | Looping}.

    Stop Behavior
    -------------
    :meth:`stop` sets a shared stop event (for other threads and tests).
    :meth:`handle_signal` only raises a flag, since it may interrupt the main
    thread while that thread holds the event's internal lock. A cycle in
    progress always completes; both are checked between cycles and after
    every sleep slice, so the loop exits within one ``wait_unit_s`` of the
    request.

    Parameters
    ----------
    cfg
        Runtime configuration.
    client
        Backend poller used for the connectivity gate.
    controller
        Runs one dispatch cycle.
    stop_event
        Optional externally owned stop event.
    """

    def __init__(
        self,
        cfg: DispatcherRuntimeConfig,
        client: BackendClient,
        controller: DispatchController,
        stop_event: Optional[threading.Event] = None,
    ):
        self._cfg = cfg
        self._client = client
        self._controller = controller
        self._stop = stop_event or threading.Event()
        self._signalled = False
        self.cycles_run = 0

    @property
    def stop_event(self) -> threading.Event:
        return self._stop

    def stop(self) -> None:
        """Request a graceful shutdown."""
        self._stop.set()

    def handle_signal(self, signum, frame) -> None:
        """Signal handler: request a graceful shutdown without taking locks."""
        self._signalled = True

    @property
    def stopping(self) -> bool:
        return self._signalled or self._stop.is_set()

    def run(self) -> int:
        """
        Run the configured mode to completion.

        Returns
        -------
        int
            Process exit code: 0 on success or requested shutdown, 1 when the
            connectivity gate fails.
        """
        connected = self._client.check_connectivity()

        if self._cfg.mode is RunMode.TEST:
            if connected:
                logger.info("Prometheus connectivity test: PASSED")
                return EXIT_OK
            logger.error("Prometheus connectivity test: FAILED")
            return EXIT_FAILURE

        if not connected:
            logger.error("Initial connectivity check failed. Exiting.")
            return EXIT_FAILURE

        logger.info("Successfully connected to Prometheus")

        while not self.stopping:
            self._controller.run_cycle()
            self.cycles_run += 1

            if self._cfg.mode is RunMode.ONCE:
                logger.info("Single run completed. Exiting.")
                return EXIT_OK

            logger.debug("Sleeping for %s seconds...", _fmt_seconds(self._cfg.interval_s))
            if self._sleep(self._cfg.interval_s):
                break

        logger.info("Alert dispatcher shutting down...")
        return EXIT_OK

    def _sleep(self, seconds: float) -> bool:
        """
        Wait up to `seconds` in slices of ``wait_unit_s``.

        Returns
        -------
        bool
            True if a stop was requested during the wait.
        """
        deadline = time.monotonic() + seconds
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return self.stopping
            if self._stop.wait(min(remaining, self._cfg.wait_unit_s)) or self._signalled:
                return True


def _fmt_seconds(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
