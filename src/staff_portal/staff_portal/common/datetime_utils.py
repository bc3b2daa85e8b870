from __future__ import annotations

import math
from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def leave_days_between(start_date: date, resume_date: date) -> int:
    """Whole days away from work; the resume date itself is a working day."""
    seconds = abs((resume_date - start_date).total_seconds())
    return max(1, math.ceil(seconds / 86400))


def format_short(value: datetime | None) -> str:
    # "Mar 04, 09:15" style used in the notification dropdown
    if value is None:
        return "-"
    return value.strftime("%b %d, %H:%M")
