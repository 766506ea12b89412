"""
utils/time_utils.py

Purpose: Time, date and financial-year helpers

- Cache freshness checks (epoch milliseconds)
- Financial year bucketing (April to March)
- Calendar month arithmetic
- ISO / form date conversions without timezone drift
"""

import calendar
import time
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Tuple

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
]

# Financial year starts in April
FY_START_MONTH = 4


def now_ms(clock: Callable[[], float] = time.time) -> int:
    """
    Current time in epoch milliseconds from the given clock.
    """
    return int(clock() * 1000)


def is_cache_fresh(timestamp_ms: Optional[int], current_ms: int, ttl_minutes: int = 5) -> bool:
    """
    Checks if a cached value stamped at ``timestamp_ms`` is still fresh.

    A missing timestamp is never fresh.
    """
    if timestamp_ms is None:
        return False
    return (current_ms - timestamp_ms) < ttl_minutes * 60 * 1000


def financial_year(d: date) -> str:
    """
    Returns the financial year label for a date.

    Examples:
        2024-03-15 -> "2023-24"
        2024-04-01 -> "2024-25"
    """
    start_year = d.year if d.month >= FY_START_MONTH else d.year - 1
    return f"{start_year}-{str(start_year + 1)[-2:]}"


def current_financial_year(today: Optional[date] = None) -> str:
    return financial_year(today or date.today())


def financial_year_options(today: Optional[date] = None) -> List[dict]:
    """
    Financial year choices for the year filter: five years back and two
    ahead of the current one, newest first.
    """
    today = today or date.today()
    current = current_financial_year(today)
    current_start = int(current[:4])

    options = []
    for offset in range(-5, 3):
        start = current_start + offset
        label = f"{start}-{str(start + 1)[-2:]}"
        options.append({
            "value": label,
            "label": f"FY {label}",
            "is_current": label == current
        })

    return sorted(options, key=lambda option: option["value"], reverse=True)


def add_months(year: int, month: int, delta: int) -> Tuple[int, int]:
    """
    Shifts a (year, month) pair by ``delta`` months. Month is 1-indexed.
    """
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def months_ago(today: date, months: int) -> date:
    """
    Same day ``months`` calendar months earlier, clamped to the last day
    of the target month (Aug 31 minus 6 months is Feb 28/29).
    """
    year, month = add_months(today.year, today.month, -months)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(today.day, last_day))


def month_name(month: int) -> str:
    """
    Short month name for a 1-indexed month.
    """
    return MONTH_NAMES[month - 1]


def parse_iso_date(value) -> Optional[date]:
    """
    Converts an API date value to a calendar date.

    The calendar date is read from the ISO string itself
    ("2024-03-15T00:00:00.000Z" -> 2024-03-15) so no local timezone
    shifts it. Blank or unparseable values return None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def parse_iso_datetime(value) -> Optional[datetime]:
    """
    Converts an API timestamp (createdAt/updatedAt) to an aware datetime.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_form_date(value: Optional[date]) -> str:
    """
    Renders a date the way a date input expects it (YYYY-MM-DD).
    """
    if value is None:
        return ""
    return value.isoformat()


def to_api_date(value: Optional[date]) -> Optional[str]:
    """
    Renders a calendar date as the ISO timestamp the backend stores.
    """
    if value is None:
        return None
    return f"{value.isoformat()}T00:00:00.000Z"


def format_display_date(d: Optional[date]) -> str:
    """
    Date as shown in tables (DD/MM/YYYY).
    """
    if not d:
        return "Invalid Date"
    return d.strftime("%d/%m/%Y")
