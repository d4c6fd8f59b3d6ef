"""Jinja filters and display formatting helpers."""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

import pytz

DEFAULT_TZ = "Asia/Singapore"


def fmt_epoch_local(value, tz_name: Optional[str] = None) -> str:
    """
    Format an epoch-milliseconds timestamp in the display time zone.
    Missing values render as ''. Unparseable values are returned as-is
    (so the page never goes blank).
    """
    if value is None or value == "":
        return ""
    try:
        millis = int(value)
    except (TypeError, ValueError):
        return str(value)

    dt = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    try:
        tz = pytz.timezone(tz_name or DEFAULT_TZ)
    except pytz.UnknownTimeZoneError:
        tz = pytz.timezone(DEFAULT_TZ)
    return dt.astimezone(tz).strftime("%d/%m/%Y %H:%M")


def fmt_price(amount, currency: str = "SGD") -> str:
    """'SGD $12.50' for a decimal amount, 'N/A' when there is none."""
    if amount is None or amount == "":
        return "N/A"
    try:
        value = Decimal(str(amount)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return "N/A"
    return f"{currency} ${value:,.2f}"


def fmt_km(value) -> str:
    if value is None:
        return "N/A"
    return f"{int(value):,} km"


def fmt_hours(value) -> str:
    if value is None:
        return "N/A"
    return f"{float(value):g}h"
