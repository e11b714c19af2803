# Query cache for backend reads. Keys: products, products:<id>, orders, orders:<id>.
# Every key is prefixed with the backend origin so switching backends never serves stale data.
from __future__ import annotations

import logging

from flask import current_app

from services import backend_api
from services.backend_url import get_backend_url

log = logging.getLogger(__name__)

PRODUCTS_KEY = "products"
ORDERS_KEY = "orders"


def product_key(product_id) -> str:
    return f"{PRODUCTS_KEY}:{int(product_id)}"


def order_key(order_id) -> str:
    return f"{ORDERS_KEY}:{int(order_id)}"


def _cache():
    """Cache instance from extensions; None when Flask-Caching is not initialised on this app."""
    from extensions import cache
    if "cache" not in current_app.extensions:
        return None
    return cache


def _full_key(key: str) -> str:
    return f"q:{get_backend_url()}:{key}"


def cached_query(key: str, fetcher, ttl: int | None = None):
    c = _cache()
    if c is None:
        return fetcher()
    full = _full_key(key)
    val = c.get(full)
    if val is not None:
        return val
    data = fetcher()
    if data is not None:
        if ttl is None:
            ttl = current_app.config.get("QUERY_CACHE_TTL", 30)
        c.set(full, data, timeout=ttl)
    return data


def invalidate(*keys: str) -> None:
    c = _cache()
    if c is None:
        return
    for key in keys:
        c.delete(_full_key(key))
    log.debug("Invalidated query cache keys: %s", ", ".join(keys))


def invalidate_all() -> None:
    """Drop every cached query (backend URL changed)."""
    c = _cache()
    if c is not None:
        c.clear()


# Reads

def get_products():
    return cached_query(PRODUCTS_KEY, backend_api.list_products)


def get_product(product_id):
    return cached_query(product_key(product_id), lambda: backend_api.get_product(product_id))


def get_orders():
    return cached_query(ORDERS_KEY, backend_api.list_orders)


def get_order(order_id):
    return cached_query(order_key(order_id), lambda: backend_api.get_order(order_id))


# Mutations (call the backend, then drop the affected queries)

def create_product(data, image=None):
    out = backend_api.create_product(data, image=image)
    invalidate(PRODUCTS_KEY)
    return out


def update_product(product_id, data, image=None):
    out = backend_api.update_product(product_id, data, image=image)
    invalidate(product_key(product_id), PRODUCTS_KEY)
    return out


def delete_product(product_id):
    out = backend_api.delete_product(product_id)
    invalidate(product_key(product_id), PRODUCTS_KEY)
    return out


def create_order(data):
    out = backend_api.create_order(data)
    invalidate(ORDERS_KEY)
    return out


def update_order(order_id, data):
    out = backend_api.update_order(order_id, data)
    invalidate(order_key(order_id), ORDERS_KEY)
    return out


def delete_order(order_id):
    out = backend_api.delete_order(order_id)
    invalidate(order_key(order_id), ORDERS_KEY)
    return out


def print_order(order_id):
    return backend_api.print_order(order_id)
