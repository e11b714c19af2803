"""
Rupiah formatting helpers (registered as Jinja filters in create_app).
"""
import re
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

import pytz

_NON_DIGITS = re.compile(r"[^0-9]")


def _group(digits: str) -> str:
    # 1234567 -> 1.234.567
    out = []
    while len(digits) > 3:
        out.insert(0, digits[-3:])
        digits = digits[:-3]
    out.insert(0, digits)
    return ".".join(out)


def format_idr(amount) -> str:
    """Format an amount as ``Rp 12.500`` (no decimals)."""
    try:
        value = Decimal(str(amount or 0)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except Exception:
        value = Decimal(0)
    sign = "-" if value < 0 else ""
    return f"{sign}Rp {_group(str(abs(int(value))))}"


def parse_formatted_number(value) -> str:
    """Keep digits only: ``'Rp 12.500'`` -> ``'12500'``."""
    return _NON_DIGITS.sub("", str(value or ""))


def format_number(value) -> str:
    """Reformat free-typed price input as ``Rp 12.500``; empty stays empty."""
    digits = parse_formatted_number(value)
    if not digits:
        return ""
    return "Rp " + _group(digits)


def parse_iso(value):
    """Parse the backend's ISO-8601 timestamps (``...Z`` or with offset) into aware UTC datetimes."""
    if not value:
        return None
    s = str(value).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(pytz.utc)


def to_local(value, tz_name: str):
    dt = parse_iso(value) if not isinstance(value, datetime) else value
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(pytz.timezone(tz_name))


def local_input_to_utc_iso(value, tz_name: str):
    """``datetime-local`` input (``YYYY-MM-DDTHH:MM``) in ``tz_name`` -> UTC ISO with ``Z``.

    Returns None for empty input; raises ValueError for malformed input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        naive = value.replace(tzinfo=None)
    else:
        s = str(value).strip()
        if not s:
            return None
        naive = datetime.strptime(s[:16], "%Y-%m-%dT%H:%M")
    local = pytz.timezone(tz_name).localize(naive)
    utc = local.astimezone(pytz.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def utc_iso_to_local_input(value, tz_name: str) -> str:
    """Inverse of local_input_to_utc_iso: ISO timestamp -> ``YYYY-MM-DDTHH:MM`` local."""
    dt = to_local(value, tz_name)
    if dt is None:
        return ""
    return dt.strftime("%Y-%m-%dT%H:%M")


def format_local_datetime(value, tz_name: str, fmt: str = "%d %b %Y %H:%M") -> str:
    dt = to_local(value, tz_name)
    if dt is None:
        return ""
    return dt.strftime(fmt)


def local_now(tz_name: str) -> datetime:
    return datetime.now(pytz.timezone(tz_name))
