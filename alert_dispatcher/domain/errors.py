"""
Dispatcher error taxonomy.

Only ``ConfigurationError`` and a failed startup connectivity gate end the
process. Every other error is caught at the cycle boundary, logged, and the
dispatcher moves on to its next tick.
"""

from __future__ import annotations


class DispatcherError(Exception):
    """Base class for all dispatcher errors."""


class ConfigurationError(DispatcherError):
    """Invalid or unknown startup option. Raised before any network activity."""


class BackendUnreachable(DispatcherError):
    """The alerting backend could not be reached within the timeout."""


class MalformedResponse(DispatcherError):
    """
    The backend answered, but the payload is unusable.

    Covers non-JSON bodies, missing fields, and a top-level ``status`` other
    than ``"success"`` (the backend reporting its own failure).
    """


class NotificationDeliveryFailure(DispatcherError):
    """A webhook POST failed or returned a non-2xx status."""
