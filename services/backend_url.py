# -*- coding: utf-8 -*-
"""
Backend URL configuration.

The admin front end talks to one external POS backend. Its origin is chosen
per browser: the Flask session first, then the ``backendUrl`` cookie, then
``Config.BACKEND_URL``.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlsplit

from flask import current_app, has_request_context, request, session

COOKIE_NAME = "backendUrl"
SESSION_KEY = "backend_url"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_backend_url(value: str) -> str:
    """Return ``scheme://host[:port]`` for user input, or raise ValueError."""
    trimmed = (value or "").strip()
    if not trimmed:
        raise ValueError("Please enter a backend URL")
    with_protocol = trimmed if _SCHEME_RE.match(trimmed) else f"http://{trimmed}"
    try:
        parts = urlsplit(with_protocol)
        port = parts.port
    except ValueError:
        raise ValueError("Invalid URL")
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https"):
        raise ValueError("URL must be http or https")
    host = (parts.hostname or "").lower()
    if not host:
        raise ValueError("Invalid URL")
    if ":" in host:
        host = f"[{host}]"
    default_port = 443 if scheme == "https" else 80
    if port is not None and port != default_port:
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def default_backend_url() -> str:
    raw = current_app.config.get("BACKEND_URL") or "http://localhost:3000"
    try:
        return normalize_backend_url(raw)
    except ValueError:
        current_app.logger.warning("Ignoring invalid BACKEND_URL %r", raw)
        return "http://localhost:3000"


def get_backend_url() -> str:
    if not has_request_context():
        return default_backend_url()
    for raw in (session.get(SESSION_KEY), request.cookies.get(COOKIE_NAME)):
        if not raw:
            continue
        try:
            return normalize_backend_url(raw)
        except ValueError:
            continue
    return default_backend_url()


def set_backend_url(response, url: str):
    """Persist ``url`` (already normalized) in the session and the cookie."""
    session[SESSION_KEY] = url
    response.set_cookie(
        COOKIE_NAME,
        url,
        max_age=current_app.config.get("BACKEND_URL_COOKIE_MAX_AGE", 60 * 60 * 24 * 30),
        path="/",
        samesite="Lax",
    )
    return response


def build_backend_url(pathname: str, base: Optional[str] = None) -> str:
    origin = base or get_backend_url()
    path = pathname if pathname.startswith("/") else f"/{pathname}"
    return urljoin(origin + "/", path)
