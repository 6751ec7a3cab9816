"""
Streak tracking — pure functions, no DB access.
"""
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable

from ..models import Profile

UTC = timezone.utc


def today_in(tz: tzinfo | None = None) -> date:
    """Current calendar date in `tz` (UTC when not given)."""
    return datetime.now(tz or UTC).date()


def previous_day(d: date) -> date:
    return d - timedelta(days=1)


def parse_session_date(value: str | date | None) -> date | None:
    """
    Accepts an ISO date, an ISO timestamp (date part is used) or a date.
    Returns None for missing values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def last_n_days(today: date, n: int = 7) -> list[date]:
    """The n calendar days ending at today, oldest first."""
    return [today - timedelta(days=i) for i in range(n - 1, -1, -1)]


def compute_next_streak(
    last_session_date: date | None,
    current_streak: int,
    today: date,
) -> int:
    """
    Returns the streak value after logging a session today.
    Same-day sessions never inflate the streak.
    """
    if last_session_date == today:
        return max(current_streak, 1)

    if last_session_date == previous_day(today):
        return current_streak + 1

    # no prior session, a gap of two or more days, or a future date
    return 1


def apply_session(profile: Profile, today: date) -> Profile:
    new_streak = compute_next_streak(profile.last_session_date, profile.current_streak, today)
    return profile.model_copy(update={"current_streak": new_streak, "last_session_date": today})


def dedupe_session_dates(dates: Iterable[date | str]) -> list[date]:
    """Distinct session dates, most recent first."""
    unique = {parse_session_date(d) for d in dates}
    unique.discard(None)
    return sorted(unique, reverse=True)


def recompute_streak(session_dates: Iterable[date | str], today: date) -> tuple[int, date | None]:
    """
    Replay every distinct session date oldest-first and return
    (current_streak, last_session_date) as they would be stored.
    Dates after `today` are ignored.
    """
    streak, last = 0, None
    for d in reversed(dedupe_session_dates(session_dates)):
        if d > today:
            continue
        streak = compute_next_streak(last, streak, d)
        last = d
    return streak, last


def streak_calendar(session_dates: Iterable[date | str], today: date, n: int = 7) -> list[dict]:
    done = set(dedupe_session_dates(session_dates))
    return [{"date": d.isoformat(), "done": d in done} for d in last_n_days(today, n)]
