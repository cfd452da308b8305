"""Date window covered by the weekly digest."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from .models import DigestWindow


def next_week_window(today: date) -> DigestWindow:
    """Return Monday..Sunday of the week strictly after *today*.

    On a Monday the window starts 7 days later, so the current week is
    never included.
    """
    # Sunday = 0 ... Saturday = 6
    weekday_index = today.isoweekday() % 7
    days_until_monday = (7 - weekday_index + 1) % 7 or 7

    start = today + timedelta(days=days_until_monday)
    return DigestWindow(start=start, end=start + timedelta(days=6))


def today_in(timezone: str) -> date:
    """Current calendar date in *timezone*."""
    return datetime.now(ZoneInfo(timezone)).date()
