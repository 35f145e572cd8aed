# core/streak.py
"""
Daily study streak arithmetic.

Streaks count calendar days, not 24h windows. All days are taken in one
timezone: the one passed in, else FLASHLEARN_TIMEZONE, else the server's
local zone. Naive datetimes are treated as UTC since that is what the
database stores.
"""
from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo
from flashlearn.config import STUDY_TIMEZONE
from flashlearn.schemas import ProgressState

class AmbiguousStreakInput(ValueError):
    """The last study day lies after the new study day (clock skew, other device)."""

    def __init__(self, last_day: date, today: date):
        self.last_day = last_day
        self.today = today
        super().__init__(
            f"Last study day {last_day.isoformat()} is after study day {today.isoformat()}."
        )

def default_timezone() -> Optional[tzinfo]:
    if STUDY_TIMEZONE:
        return ZoneInfo(STUDY_TIMEZONE)
    return None

def calendar_day(instant: datetime, tz: Optional[tzinfo] = None) -> date:
    """The calendar day `instant` falls on in `tz` (local zone when None)."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).date()

def next_progress(
    prev: ProgressState,
    study_instant: datetime,
    tz: Optional[tzinfo] = None,
) -> ProgressState:
    """
    Streak counters after a completed study session at `study_instant`.

    - first session ever      -> streak 1
    - same day as last time   -> unchanged
    - the day after last time -> streak + 1
    - any longer gap          -> streak 1
    - a day before last time  -> AmbiguousStreakInput

    Card counts are passed through untouched; `prev` is not modified.
    """
    if tz is None:
        tz = default_timezone()
    today = calendar_day(study_instant, tz)

    if prev.last_study_date is None:
        current_streak = 1
    else:
        last = calendar_day(prev.last_study_date, tz)
        gap = (today - last).days
        if gap < 0:
            raise AmbiguousStreakInput(last, today)
        if gap == 0:
            current_streak = prev.current_streak
        elif gap == 1:
            current_streak = prev.current_streak + 1
        else:
            current_streak = 1

    return prev.model_copy(update={
        "current_streak": current_streak,
        "longest_streak": max(prev.longest_streak, current_streak),
        "last_study_date": study_instant,
    })
