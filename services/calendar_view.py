# -*- coding: utf-8 -*-
"""
Pickup calendar: orders grouped by the local day of their pickup date.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from utils.format import to_local


def resolve_month(year, month, today: date) -> Tuple[int, int]:
    """Validated (year, month); anything unusable falls back to today's month."""
    try:
        y = int(year)
        m = int(month)
    except (TypeError, ValueError):
        return today.year, today.month
    # 9999-12 would need days from year 10000 to fill its last week
    if not (1 <= m <= 12) or not (1 <= y <= 9998):
        return today.year, today.month
    return y, m


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def group_by_pickup_day(orders, tz_name: str):
    """Split orders into ``({date: [orders]}, [orders without pickup date])``.

    Orders within a day are sorted by pickup time.
    """
    by_day: Dict[date, List[Dict[str, Any]]] = {}
    unscheduled: List[Dict[str, Any]] = []
    for order in orders or []:
        local = to_local(order.get("pickupDate"), tz_name)
        if local is None:
            unscheduled.append(order)
            continue
        entry = dict(order)
        entry["pickupLocal"] = local
        by_day.setdefault(local.date(), []).append(entry)
    for day_orders in by_day.values():
        day_orders.sort(key=lambda o: o["pickupLocal"])
    return by_day, unscheduled


def build_month(orders, year: int, month: int, tz_name: str,
                today: Optional[date] = None) -> Dict[str, Any]:
    """Month grid for the template: weeks (Monday first) of day cells."""
    by_day, unscheduled = group_by_pickup_day(orders, tz_name)
    cal = calendar.Calendar(firstweekday=calendar.MONDAY)
    weeks = []
    for week in cal.monthdatescalendar(year, month):
        cells = []
        for d in week:
            cells.append({
                "date": d,
                "in_month": d.month == month,
                "is_today": today is not None and d == today,
                "orders": by_day.get(d, []),
            })
        weeks.append(cells)
    prev_y, prev_m = shift_month(year, month, -1)
    next_y, next_m = shift_month(year, month, 1)
    in_month = sum(len(v) for d, v in by_day.items() if d.year == year and d.month == month)
    return {
        "year": year,
        "month": month,
        "month_name": calendar.month_name[month],
        "weekdays": [calendar.day_abbr[(calendar.MONDAY + i) % 7] for i in range(7)],
        "weeks": weeks,
        "unscheduled": unscheduled,
        "prev": {"year": prev_y, "month": prev_m},
        "next": {"year": next_y, "month": next_m},
        "count": in_month,
    }


def upcoming_pickups(orders: List[Mapping[str, Any]], tz_name: str, start: date, days: int = 7):
    """Orders with a pickup on ``start`` .. ``start + days - 1`` (local), soonest first."""
    by_day, _ = group_by_pickup_day(orders, tz_name)
    out = []
    for d in sorted(by_day):
        if 0 <= (d - start).days < days:
            out.extend(by_day[d])
    return out
