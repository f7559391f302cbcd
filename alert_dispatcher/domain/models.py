"""
Domain models and enums.

This module defines the core domain-level types used across the dispatcher:
- Alert lifecycle states as reported by the alerting backend
- The decoded, read-only Alert record
- CycleSummary, the per-cycle counts derived from one fetch

These are immutable (frozen) dataclasses so they can be passed between the
poller, reporter and notifier without defensive copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class AlertState(str, Enum):
    """
    Lifecycle state of an alert as reported by the backend.

    Members
    -------
    FIRING : str
        Condition is true and past its hold duration.
    PENDING : str
        Condition is true but still inside its hold duration.
    INACTIVE : str
        Condition is no longer true. Reported as "resolved" in summaries.
    UNKNOWN : str
        Any other (or missing) wire value.
    """

    FIRING = "firing"
    PENDING = "pending"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "AlertState":
        """
        Map a wire value to a state, falling back to UNKNOWN.

        Parameters
        ----------
        value
            Raw ``state`` field from the alert object (may be None).

        Returns
        -------
        AlertState
            Matching member, or ``UNKNOWN`` if the value is not recognized.
        """
        try:
            return cls(str(value))
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Alert:
    """
    One alert record from the backend's alert list.

    Parameters
    ----------
    name
        Alert rule identifier (``labels.alertname``).
    severity
        Free-form severity label (``labels.severity``).
    instance
        Target identifier (``labels.instance``).
    state
        Lifecycle state.
    active_since
        ``activeAt`` timestamp string, if the backend supplied one.
    summary, description
        Optional annotation texts.
    raw
        The alert object exactly as received; forwarded verbatim to webhooks.
    """

    name: str
    severity: str
    instance: str
    state: AlertState
    active_since: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_firing(self) -> bool:
        return self.state is AlertState.FIRING


@dataclass(frozen=True)
class CycleSummary:
    """
    Counts of alerts observed in a single fetch.

    ``firing + pending + resolved + unknown == total`` always holds. The
    summary is rebuilt every cycle and never carried over to the next one.
    """

    total: int = 0
    firing: int = 0
    pending: int = 0
    resolved: int = 0
    unknown: int = 0
