# -*- coding: utf-8 -*-
"""
Backend API client: Flask admin to POS backend (REST only).

The admin does not store anything. Every product, order and print job goes
through these calls. Responses use the envelope ``{"success", "data"}``; the
payload under ``data`` is returned as plain dicts (wire names, camelCase).
On failure, raise; callers flash the message.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import requests
from flask import current_app, has_app_context

from services.backend_url import build_backend_url

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class BackendError(Exception):
    """Base for backend failures (non-2xx or unusable response)."""

    def __init__(self, message: str, status: Optional[int] = None, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.errors = errors or {}


class BackendUnavailableError(BackendError):
    """Backend down, timeout, or connection refused."""
    pass


class BackendNotFoundError(BackendError):
    """404: product or order does not exist."""
    pass


def _timeout() -> int:
    if has_app_context():
        return int(current_app.config.get("BACKEND_TIMEOUT", DEFAULT_TIMEOUT))
    return DEFAULT_TIMEOUT


def _error_message(r: requests.Response) -> Tuple[str, Dict[str, str]]:
    text = ""
    try:
        text = r.text or ""
    except Exception:
        text = ""
    errors: Dict[str, str] = {}
    if r.headers.get("content-type", "").startswith("application/json"):
        try:
            body = r.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            errors = body.get("errors") or {}
            msg = body.get("message")
            if errors and isinstance(errors, dict):
                detail = "; ".join(f"{k}: {v}" for k, v in errors.items())
                msg = f"{msg}: {detail}" if msg else detail
            if msg:
                return str(msg), errors
    return (text.strip() or f"Request failed ({r.status_code})"), errors


def _request(method: str, path: str, json: Optional[Dict[str, Any]] = None,
             data: Optional[Dict[str, Any]] = None, files: Optional[Dict[str, Any]] = None) -> Any:
    url = build_backend_url(path)
    headers = {}
    if json is not None:
        headers["Content-Type"] = "application/json"
    started = time.monotonic()
    try:
        r = requests.request(method, url, json=json, data=data, files=files,
                             headers=headers, timeout=_timeout())
    except requests.exceptions.Timeout:
        log.warning("Backend timeout: %s %s", method, url)
        raise BackendUnavailableError("Backend request timed out")
    except requests.exceptions.RequestException as e:
        log.warning("Backend unreachable: %s %s (%s)", method, url, e)
        raise BackendUnavailableError(f"Backend unreachable: {e}")

    elapsed = int((time.monotonic() - started) * 1000)
    log.debug("%s %s -> %s (%sms)", method, url, r.status_code, elapsed)

    if not r.ok:
        message, errors = _error_message(r)
        log.warning("Backend error: %s %s -> %s: %s", method, url, r.status_code, message)
        if r.status_code == 404:
            raise BackendNotFoundError(message, status=404, errors=errors)
        raise BackendError(message, status=r.status_code, errors=errors)

    if not r.content:
        return {"ok": True}
    try:
        body = r.json()
    except ValueError:
        raise BackendError("Backend returned an invalid response", status=r.status_code)

    # Unwrap {"success", "data"}; delete responses carry only a message
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return {"ok": True}


def _product_form(data: Dict[str, Any], image) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    form = {"name": data.get("name", ""), "price": str(data.get("price", ""))}
    if (data.get("description") or "").strip():
        form["description"] = data["description"]
    files = {"image": (image.filename, image.stream, image.mimetype or "application/octet-stream")}
    return form, files


# Products

def list_products() -> List[Dict[str, Any]]:
    return _request("GET", "/api/products") or []


def get_product(product_id: int) -> Dict[str, Any]:
    return _request("GET", f"/api/products/{int(product_id)}")


def create_product(data: Dict[str, Any], image=None) -> Dict[str, Any]:
    """Create a product. With ``image`` (a werkzeug FileStorage) the request is multipart."""
    if image is not None:
        form, files = _product_form(data, image)
        return _request("POST", "/api/products", data=form, files=files)
    return _request("POST", "/api/products", json=data)


def update_product(product_id: int, data: Dict[str, Any], image=None) -> Dict[str, Any]:
    if image is not None:
        form, files = _product_form(data, image)
        return _request("PUT", f"/api/products/{int(product_id)}", data=form, files=files)
    return _request("PUT", f"/api/products/{int(product_id)}", json=data)


def delete_product(product_id: int) -> Dict[str, Any]:
    return _request("DELETE", f"/api/products/{int(product_id)}")


# Orders

def list_orders() -> List[Dict[str, Any]]:
    return _request("GET", "/api/orders") or []


def get_order(order_id: int) -> Dict[str, Any]:
    return _request("GET", f"/api/orders/{int(order_id)}")


def create_order(data: Dict[str, Any]) -> Dict[str, Any]:
    return _request("POST", "/api/orders", json=data)


def update_order(order_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    return _request("PUT", f"/api/orders/{int(order_id)}", json=data)


def delete_order(order_id: int) -> Dict[str, Any]:
    return _request("DELETE", f"/api/orders/{int(order_id)}")


def print_order(order_id: int) -> Dict[str, Any]:
    """Ask the backend to print the receipt. Returns ``{printed, devicePath, orderId}``."""
    return _request("POST", f"/api/printer/orders/{int(order_id)}/print")
