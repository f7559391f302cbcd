from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from alert_dispatcher.domain.models import Alert

SOURCE_TAG = "alert_dispatcher"


def _utc_iso(ts: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with second precision and a ``Z`` suffix.

    Naive datetimes are taken to be UTC already.
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_alert_webhook_payload(alert: Alert, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Build the webhook envelope for one alert.

    Parameters
    ----------
    alert
        Alert to forward. Its raw backend object is embedded unchanged.
    now
        Envelope timestamp; defaults to the current UTC time.

    Returns
    -------
    dict
        ``{"timestamp": ..., "alert": {...}, "source": "alert_dispatcher"}``
    """
    return {
        "timestamp": _utc_iso(now or datetime.now(timezone.utc)),
        "alert": alert.raw,
        "source": SOURCE_TAG,
    }
