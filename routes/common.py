# Shared helpers for the screen blueprints. No route handlers.
# Each route loads what it needs; only the backend guard runs before requests.

from __future__ import annotations

import logging

from flask import current_app, flash, render_template, request

from services.backend_api import BackendError
from services.health import HealthMonitor

log = logging.getLogger(__name__)


def backend_guard():
    """before_request hook for screens that need the backend.

    Re-checks reachability once per poll interval; while the last check
    failed, the screen is replaced by the "Backend Unavailable" page.
    """
    monitor = HealthMonitor.load()
    if monitor.is_stale(current_app.config.get('HEALTH_POLL_SECONDS', 30)):
        monitor.check(show_notice=True)
    if not monitor.is_healthy:
        return render_template('backend_unavailable.html', monitor=monitor,
                               next_url=request.full_path.rstrip('?')), 503
    return None


def flash_backend_error(err: Exception, fallback: str) -> None:
    message = getattr(err, 'message', None) or str(err) or fallback
    flash(message, 'danger')


def load_or_flash(fn, fallback, default=None):
    """Run a backend read; on failure flash and return ``default``."""
    try:
        return fn()
    except BackendError as e:
        log.warning('%s: %s', fallback, e)
        flash_backend_error(e, fallback)
        return default
