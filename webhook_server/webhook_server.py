"""
Development webhook sink for the Alert Dispatcher.

Receives the envelopes the dispatcher POSTs for firing alerts and keeps the
most recent ones in memory so they can be inspected while testing locally:

    python -m webhook_server.webhook_server
    alert-dispatcher -w http://localhost:8000/alert
"""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify, request

# Load .env next to this module (or the frozen executable)
BASE_DIR = Path(sys.executable).resolve().parent if getattr(sys, "frozen", False) else Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")

app = Flask(__name__)

EXPECTED_TOKEN = os.getenv("WEBHOOK_TOKEN", "")
MAX_EVENTS = 500

EVENTS: list[dict] = []


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def require_bearer(fn):
    """Require ``Authorization: Bearer <WEBHOOK_TOKEN>`` when a token is configured."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not EXPECTED_TOKEN:
            return fn(*args, **kwargs)

        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return jsonify({"error": "unauthorized"}), 401
        if auth.removeprefix("Bearer ").strip() != EXPECTED_TOKEN:
            return jsonify({"error": "invalid token"}), 403
        return fn(*args, **kwargs)
    return wrapper


@app.post("/alert")
@require_bearer
def alert():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("alert"), dict):
        return jsonify({"error": "expected a JSON object with an 'alert' object"}), 400

    EVENTS.append({"received_at": _now_iso(), "body": data})
    if len(EVENTS) > MAX_EVENTS:
        del EVENTS[:-MAX_EVENTS]

    labels = data["alert"].get("labels") or {}
    app.logger.info(
        "webhook received source=%s alert=%s state=%s",
        data.get("source"),
        labels.get("alertname"),
        data["alert"].get("state"),
    )

    return jsonify({"status": "ok"}), 200


@app.get("/api/alerts/recent")
@require_bearer
def api_recent():
    recent = list(reversed(EVENTS[-200:]))
    return jsonify({"count": len(EVENTS), "events": recent}), 200


@app.get("/health")
def health():
    return jsonify({"status": "ok"}), 200


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("WEBHOOK_PORT", "8000")), debug=False)
