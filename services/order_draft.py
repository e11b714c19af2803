# -*- coding: utf-8 -*-
"""
Editable list of order lines behind the new/edit order screens.

The draft round-trips through the order form on every button press (add a
product, add a custom item, remove a line), so each operation works on plain
dicts in the backend's wire shape.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from services.order_totals import (
    ITEM_CUSTOM,
    ITEM_PRODUCT,
    item_type,
    line_total,
    reconcile_price_at_sale,
)

_NON_DIGITS = re.compile(r"[^0-9]")


class DraftError(ValueError):
    """Invalid line edit (shown to the user as-is)."""
    pass


def parse_amount(value) -> int:
    """Digits only; empty means 0 (which removes the line)."""
    if isinstance(value, int):
        return value
    digits = _NON_DIGITS.sub("", str(value or ""))
    return int(digits) if digits else 0


def _clean_notes(value) -> Optional[str]:
    s = (value or "").strip() if isinstance(value, str) else value
    return s or None


class OrderDraft:
    def __init__(self, lines: Optional[List[Dict[str, Any]]] = None):
        self.lines: List[Dict[str, Any]] = []
        for line in lines or []:
            self._append(line)

    def __len__(self):
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    @classmethod
    def from_order(cls, order: Mapping[str, Any]) -> "OrderDraft":
        return cls(list(order.get("items") or []))

    def _append(self, line: Mapping[str, Any]) -> None:
        if item_type(line) == ITEM_CUSTOM:
            self.lines.append({
                "itemType": ITEM_CUSTOM,
                "customName": (line.get("customName") or "").strip(),
                "customPrice": parse_amount(line.get("customPrice")),
                "notes": _clean_notes(line.get("notes")),
            })
            return
        amount = parse_amount(line.get("amount"))
        if amount <= 0:
            return
        price_at_sale = line.get("priceAtSale")
        self.lines.append({
            "itemType": ITEM_PRODUCT,
            "productId": int(line["productId"]),
            "amount": amount,
            "notes": _clean_notes(line.get("notes")),
            "priceAtSale": parse_amount(price_at_sale) if price_at_sale not in (None, "") else None,
        })

    def add_product(self, product_id: int) -> None:
        product_id = int(product_id)
        for line in self.lines:
            if item_type(line) == ITEM_PRODUCT and line["productId"] == product_id:
                line["amount"] += 1
                return
        self.lines.append({
            "itemType": ITEM_PRODUCT,
            "productId": product_id,
            "amount": 1,
            "notes": None,
            "priceAtSale": None,
        })

    def set_amount(self, index: int, amount) -> None:
        index, line = self._line(index)
        if item_type(line) != ITEM_PRODUCT:
            return
        value = parse_amount(amount)
        if value <= 0:
            del self.lines[index]
        else:
            line["amount"] = value

    def add_custom(self, name, price, notes=None) -> None:
        name = (name or "").strip()
        if not name:
            raise DraftError("Custom item name is required")
        try:
            price = int(str(price).strip()) if not isinstance(price, int) else price
        except (TypeError, ValueError):
            raise DraftError("Price must be an integer")
        if price < 0:
            raise DraftError("Price must be a positive integer")
        self.lines.append({
            "itemType": ITEM_CUSTOM,
            "customName": name,
            "customPrice": price,
            "notes": _clean_notes(notes),
        })

    def remove(self, index: int) -> None:
        index, _ = self._line(index)
        del self.lines[index]

    def _line(self, index) -> Tuple[int, Dict[str, Any]]:
        try:
            index = int(index)
        except (TypeError, ValueError):
            raise DraftError("Unknown line")
        if index < 0 or index >= len(self.lines):
            raise DraftError("Unknown line")
        return index, self.lines[index]

    def total(self, catalog: Optional[Mapping[int, Mapping[str, Any]]] = None) -> int:
        return sum(line_total(line, catalog) for line in self.lines)

    def to_payload(self, catalog: Optional[Mapping[int, Mapping[str, Any]]] = None) -> List[Dict[str, Any]]:
        """Items for CreateOrderInput/UpdateOrderInput.

        Optional keys are left out instead of being sent as null.
        """
        items = []
        for line in self.lines:
            if item_type(line) == ITEM_CUSTOM:
                out = {
                    "itemType": ITEM_CUSTOM,
                    "customName": line["customName"],
                    "customPrice": line["customPrice"],
                }
            else:
                out = {
                    "itemType": ITEM_PRODUCT,
                    "productId": line["productId"],
                    "amount": line["amount"],
                }
                catalog_price = None
                if catalog and line["productId"] in catalog:
                    catalog_price = catalog[line["productId"]].get("price")
                override = reconcile_price_at_sale(line.get("priceAtSale"), catalog_price)
                if override is not None:
                    out["priceAtSale"] = override
            if line.get("notes"):
                out["notes"] = line["notes"]
            items.append(out)
        return items
