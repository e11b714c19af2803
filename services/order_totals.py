# -*- coding: utf-8 -*-
"""
Order totals computed on the admin side from mixed line items.

Product lines: amount × unit price, where the unit price is the price-at-sale
override when present, else the embedded product's price, else the current
catalog price. Custom lines: the custom price, once.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

ITEM_PRODUCT = "product"
ITEM_CUSTOM = "custom"


def _to_int(value, default: int = 0) -> int:
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        return default


def item_type(item: Mapping[str, Any]) -> str:
    # Older backends omit itemType on catalog lines
    t = (item.get("itemType") or "").strip().lower()
    if t == ITEM_CUSTOM:
        return ITEM_CUSTOM
    return ITEM_PRODUCT


def unit_price(item: Mapping[str, Any], catalog: Optional[Mapping[int, Mapping[str, Any]]] = None) -> int:
    if item_type(item) == ITEM_CUSTOM:
        return _to_int(item.get("customPrice"))
    if item.get("priceAtSale") is not None:
        return _to_int(item.get("priceAtSale"))
    product = item.get("product")
    if product and product.get("price") is not None:
        return _to_int(product.get("price"))
    if catalog:
        p = catalog.get(_to_int(item.get("productId"), -1))
        if p and p.get("price") is not None:
            return _to_int(p.get("price"))
    return 0


def line_amount(item: Mapping[str, Any]) -> int:
    if item_type(item) == ITEM_CUSTOM:
        return 1
    return _to_int(item.get("amount"))


def line_total(item: Mapping[str, Any], catalog: Optional[Mapping[int, Mapping[str, Any]]] = None) -> int:
    return unit_price(item, catalog) * line_amount(item)


def order_total(order_or_items, catalog: Optional[Mapping[int, Mapping[str, Any]]] = None) -> int:
    items = order_or_items.get("items") if isinstance(order_or_items, Mapping) else order_or_items
    return sum(line_total(it, catalog) for it in (items or []))


def items_count(order: Mapping[str, Any]) -> int:
    return len(order.get("items") or [])


def line_label(item: Mapping[str, Any], catalog: Optional[Mapping[int, Mapping[str, Any]]] = None) -> str:
    if item_type(item) == ITEM_CUSTOM:
        return item.get("customName") or "Custom item"
    product = item.get("product")
    if product and product.get("name"):
        return product["name"]
    if catalog:
        p = catalog.get(_to_int(item.get("productId"), -1))
        if p and p.get("name"):
            return p["name"]
    return f"Product #{item.get('productId')}"


def catalog_by_id(products: Iterable[Mapping[str, Any]]) -> Dict[int, Mapping[str, Any]]:
    out = {}
    for p in products or []:
        try:
            out[int(p["id"])] = p
        except (KeyError, TypeError, ValueError):
            continue
    return out


def reconcile_price_at_sale(override, catalog_price) -> Optional[int]:
    """Return the override to send, or None when it should be omitted.

    An empty override, or one equal to the catalog price, is dropped so the
    backend applies its own price. Negative overrides are rejected.
    """
    if override is None or (isinstance(override, str) and not override.strip()):
        return None
    value = _to_int(override, default=-1)
    if value < 0:
        raise ValueError("Price must be a positive integer")
    if catalog_price is not None and value == _to_int(catalog_price, default=-1):
        return None
    return value
