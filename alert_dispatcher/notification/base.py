from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Protocol


@dataclass(frozen=True)
class NotificationEvent:
    """
    One delivery request for the notification layer.

    Parameters
    ----------
    kind
        Event kind, e.g. "alert_firing". Used in delivery log lines.
    alert_name
        Name of the alert being delivered.
    payload
        JSON-serializable request body (the webhook envelope).
    """

    kind: str
    alert_name: str
    payload: Dict[str, Any]


class Notifier(Protocol):
    """
    Anything that can deliver a :class:`NotificationEvent`.

    Implementations raise
    :class:`~alert_dispatcher.domain.errors.NotificationDeliveryFailure`
    when delivery does not succeed.
    """

    def notify(self, event: NotificationEvent) -> None:
        ...
