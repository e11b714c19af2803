# -*- coding: utf-8 -*-
"""
Backend health check and per-session reachability state.

``check_backend_health`` is a single GET ``/health`` with a short timeout.
``HealthMonitor`` keeps the last result in the Flask session and decides
when the user gets a notice: once when the backend goes down, once when it
comes back.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests
from flask import current_app, flash, has_app_context, session
from flask_babel import gettext as _

from services.backend_url import build_backend_url

log = logging.getLogger(__name__)

SESSION_KEY = "backend_health"


def _health_timeout() -> int:
    if has_app_context():
        return int(current_app.config.get("HEALTH_TIMEOUT", 5))
    return 5


def check_backend_health(url: Optional[str] = None) -> Dict[str, Any]:
    """GET <url>/health. Never raises; returns ``{ok, latency, message, data}``."""
    started = time.monotonic()
    health_url = f"{url}/health" if url else build_backend_url("/health")
    try:
        r = requests.get(health_url, timeout=_health_timeout(),
                         headers={"Cache-Control": "no-store"})
    except requests.exceptions.RequestException as e:
        latency = int(round((time.monotonic() - started) * 1000))
        message = str(e) or "Connection failed"
        log.warning("Health check failed for %s: %s", health_url, message)
        return {"ok": False, "latency": latency, "message": message, "data": None}

    latency = int(round((time.monotonic() - started) * 1000))
    if not r.ok:
        text = (r.text or "").strip()
        log.warning("Health check %s -> HTTP %s", health_url, r.status_code)
        return {"ok": False, "latency": latency, "message": text or f"HTTP {r.status_code}", "data": None}

    try:
        data = r.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    log.debug("Health check %s ok (%sms)", health_url, latency)
    return {"ok": True, "latency": latency, "message": "Connected", "data": data}


class HealthMonitor:
    """Reachability state for the current browser session.

    The state starts healthy so pages render until the first check says
    otherwise.
    """

    def __init__(self, state: Optional[Dict[str, Any]] = None):
        state = state or {}
        self.is_healthy = bool(state.get("is_healthy", True))
        self.last_check = state.get("last_check")
        self.has_shown_error = bool(state.get("has_shown_error", False))
        self.message = state.get("message") or ""

    @classmethod
    def load(cls) -> "HealthMonitor":
        return cls(session.get(SESSION_KEY))

    def save(self) -> None:
        session[SESSION_KEY] = self.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_healthy": self.is_healthy,
            "last_check": self.last_check,
            "has_shown_error": self.has_shown_error,
            "message": self.message,
        }

    def record(self, result: Dict[str, Any], show_notice: bool = True) -> Optional[tuple]:
        """Apply a check result. Returns ``(message, category)`` when a notice is due."""
        self.is_healthy = bool(result.get("ok"))
        self.last_check = int(time.time() * 1000)
        self.message = result.get("message") or ""

        if not self.is_healthy and show_notice and not self.has_shown_error:
            self.has_shown_error = True
            return (_("Backend connection failed: %(message)s. Check your backend URL in settings.",
                      message=self.message), "danger")
        if self.is_healthy and self.has_shown_error:
            self.has_shown_error = False
            return (_("Backend connection restored"), "success")
        return None

    def is_stale(self, max_age_seconds: int) -> bool:
        if self.last_check is None:
            return True
        return (time.time() * 1000 - self.last_check) >= max_age_seconds * 1000

    def check(self, show_notice: bool = True) -> Dict[str, Any]:
        """Run the health check, update and persist state, flash any notice."""
        result = check_backend_health()
        notice = self.record(result, show_notice=show_notice)
        self.save()
        if notice:
            flash(*notice)
        return result
