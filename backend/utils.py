#file: backend/utils.py

import os
import time
from datetime import date, datetime
from typing import Optional, Tuple

import pytz

from backend.classifier import parse_number

DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "UTC")


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def format_reading_time(timestamp_ms: int, tz_name: str = DISPLAY_TIMEZONE) -> Tuple[str, str]:
    """Derive display (time, date) strings from an epoch millisecond timestamp."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, pytz.utc).astimezone(pytz.timezone(tz_name))
    return moment.strftime("%H:%M:%S"), moment.strftime("%Y-%m-%d")


def export_filename(day: Optional[date] = None) -> str:
    day = day or datetime.now(pytz.utc).date()
    return f"air-quality-{day.isoformat()}.json"


def c_to_f(celsius: str) -> str:
    value = parse_number(celsius)
    return "" if value is None else f"{value * 9 / 5 + 32:.1f}"


def format_uptime(seconds: str) -> str:
    """Format device uptime seconds as 'Xh Ym' or 'Ym'."""
    value = parse_number(seconds)
    if value is None:
        return ""
    total = int(value)
    hours, minutes = total // 3600, (total % 3600) // 60
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def time_ago(timestamp_ms: int, now: Optional[int] = None) -> str:
    mins = ((now if now is not None else now_ms()) - timestamp_ms) // 60000
    hrs = mins // 60
    if hrs > 24:
        return f"{hrs // 24}d ago"
    if hrs > 0:
        return f"{hrs}h {mins % 60}m ago"
    if mins > 0:
        return f"{mins}m ago"
    return "just now"
