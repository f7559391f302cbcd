from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from alert_dispatcher.config.dispatcher_config import DispatcherConfig
from alert_dispatcher.core.reporter import AlertReporter
from alert_dispatcher.logging_config import CycleRotatingFileHandler
from alert_dispatcher.notification.forwarder import AlertForwarder
from alert_dispatcher.notification.webhook_notifier import WebhookConfig, WebhookNotifier
from alert_dispatcher.runtime.dispatcher_runtime import DispatcherRuntime, DispatcherRuntimeConfig
from alert_dispatcher.services.controller import DispatchController
from alert_dispatcher.transport.backend_client import BackendClient, BackendClientConfig


@dataclass(frozen=True)
class DispatcherWiring:
    """Everything the CLI needs to run the dispatcher."""
    config: DispatcherConfig
    client: BackendClient
    reporter: AlertReporter
    forwarder: Optional[AlertForwarder]
    controller: DispatchController
    runtime: DispatcherRuntime


def build_client(cfg: DispatcherConfig) -> BackendClient:
    return BackendClient(
        BackendClientConfig(
            base_url=cfg.backend_url,
            connect_timeout_s=cfg.connect_timeout_s,
            fetch_timeout_s=cfg.fetch_timeout_s,
        )
    )


def build_forwarder(cfg: DispatcherConfig) -> Optional[AlertForwarder]:
    if not cfg.webhook_url:
        return None

    auth_header = cfg.webhook_auth_header
    if auth_header and not auth_header.startswith("Bearer "):
        auth_header = f"Bearer {auth_header}"

    notifier = WebhookNotifier(
        WebhookConfig(
            url=cfg.webhook_url,
            auth_header=auth_header,
            timeout_s=cfg.webhook_timeout_s,
            verify_tls=cfg.webhook_verify_tls,
        )
    )
    return AlertForwarder(notifier, destination=cfg.webhook_url)


def build_dispatcher_system(
    cfg: DispatcherConfig,
    file_sink: Optional[CycleRotatingFileHandler] = None,
    stop_event: Optional[threading.Event] = None,
) -> DispatcherWiring:
    # --- POLLER ---
    client = build_client(cfg)

    # --- REPORTING ---
    reporter = AlertReporter(file_sink=file_sink)

    # --- NOTIFICATIONS ---
    forwarder = build_forwarder(cfg)

    # --- CONTROLLER ---
    controller = DispatchController(client=client, reporter=reporter, forwarder=forwarder)

    # --- RUNTIME ---
    runtime = DispatcherRuntime(
        cfg=DispatcherRuntimeConfig(
            mode=cfg.mode,
            interval_s=cfg.interval_s,
            wait_unit_s=cfg.wait_unit_s,
        ),
        client=client,
        controller=controller,
        stop_event=stop_event,
    )

    return DispatcherWiring(
        config=cfg,
        client=client,
        reporter=reporter,
        forwarder=forwarder,
        controller=controller,
        runtime=runtime,
    )
