from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from alert_dispatcher.domain.errors import MalformedResponse
from alert_dispatcher.domain.models import Alert, AlertState


def _opt_str(value: Any) -> Optional[str]:
    """
    Normalize an optional text field: None and empty strings become None.
    """
    if value is None:
        return None
    text = str(value)
    return text or None


def validate_payload(text: str) -> List[Any]:
    """
    Validate an alert-listing response body and return its raw alert items.

    Parameters
    ----------
    text
        Response body from ``/api/v1/alerts``.

    Returns
    -------
    list
        The ``data.alerts`` list, items unmodified (may contain nulls).

    Raises
    ------
    MalformedResponse
        If the body is not a JSON object, if ``status`` is not ``"success"``
        (a missing status counts as ``"error"``), or if ``data.alerts`` is
        missing or not a list.
    """
    try:
        doc = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedResponse("Invalid JSON response from Prometheus API") from e

    if not isinstance(doc, dict):
        raise MalformedResponse("Invalid JSON response from Prometheus API: expected an object")

    status = doc.get("status") or "error"
    if status != "success":
        raise MalformedResponse(f"Prometheus API returned error status: {status}")

    data = doc.get("data")
    alerts = data.get("alerts") if isinstance(data, dict) else None
    if not isinstance(alerts, list):
        raise MalformedResponse("Prometheus API response is missing data.alerts")

    return alerts


def decode_alert(obj: Dict[str, Any]) -> Alert:
    """
    Decode one alert object into an :class:`~alert_dispatcher.domain.models.Alert`.

    Missing labels fall back to ``"Unknown"`` (name) and ``"unknown"``
    (severity, instance); an unrecognized state becomes ``AlertState.UNKNOWN``.
    """
    labels = obj.get("labels") or {}
    annotations = obj.get("annotations") or {}
    if not isinstance(labels, dict):
        labels = {}
    if not isinstance(annotations, dict):
        annotations = {}

    return Alert(
        name=str(labels.get("alertname") or "Unknown"),
        severity=str(labels.get("severity") or "unknown"),
        instance=str(labels.get("instance") or "unknown"),
        state=AlertState.parse(obj.get("state")),
        active_since=_opt_str(obj.get("activeAt")),
        summary=_opt_str(annotations.get("summary")),
        description=_opt_str(annotations.get("description")),
        raw=obj,
    )


def decode_alerts(items: List[Any]) -> List[Alert]:
    """
    Decode every usable item of a validated alert list.

    Null, empty and non-object entries are skipped; they are not alerts and
    do not count towards any summary bucket.
    """
    return [decode_alert(item) for item in items if isinstance(item, dict) and item]
