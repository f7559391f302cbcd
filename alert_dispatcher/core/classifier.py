"""
Per-cycle alert classification.

Counts are taken from a single fetch and discarded afterwards; the same alert
seen in two consecutive cycles is counted (and reported) twice.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from alert_dispatcher.domain.models import Alert, AlertState, CycleSummary


def classify(alerts: Iterable[Alert]) -> CycleSummary:
    """
    Build the cycle summary for a list of decoded alerts.

    Parameters
    ----------
    alerts
        Alerts decoded from one fetch.

    Returns
    -------
    CycleSummary
        Counts by state. Wire state ``inactive`` is counted as ``resolved``.
    """
    by_state = Counter(a.state for a in alerts)
    return CycleSummary(
        total=sum(by_state.values()),
        firing=by_state[AlertState.FIRING],
        pending=by_state[AlertState.PENDING],
        resolved=by_state[AlertState.INACTIVE],
        unknown=by_state[AlertState.UNKNOWN],
    )
