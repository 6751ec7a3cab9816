from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from acers.engine.streak import (
    compute_next_streak, apply_session, previous_day, parse_session_date,
    last_n_days, dedupe_session_dates, recompute_streak, streak_calendar, today_in,
)
from acers.models import Profile

TODAY = date(2024, 3, 10)
YESTERDAY = TODAY - timedelta(days=1)
TWO_DAYS_AGO = TODAY - timedelta(days=2)


def _profile(streak=0, last=None):
    return Profile(id="user-1", full_name="Abebe", current_streak=streak, last_session_date=last)


class TestComputeNextStreak:
    def test_first_session_ever_starts_streak_at_1(self):
        assert compute_next_streak(None, 0, TODAY) == 1

    def test_consecutive_day_increments_streak(self):
        assert compute_next_streak(YESTERDAY, 5, TODAY) == 6

    def test_same_day_leaves_streak_unchanged(self):
        assert compute_next_streak(TODAY, 5, TODAY) == 5

    def test_same_day_with_zero_streak_repairs_to_1(self):
        assert compute_next_streak(TODAY, 0, TODAY) == 1

    def test_broken_streak_resets_to_1(self):
        assert compute_next_streak(TWO_DAYS_AGO, 10, TODAY) == 1

    def test_future_date_resets_to_1(self):
        assert compute_next_streak(TODAY + timedelta(days=1), 4, TODAY) == 1

    def test_increment_across_month_boundary(self):
        assert compute_next_streak(date(2024, 2, 29), 3, date(2024, 3, 1)) == 4


class TestApplySession:
    def test_scenario_continue(self):
        updated = apply_session(_profile(5, date(2024, 3, 9)), TODAY)
        assert updated.current_streak == 6
        assert updated.last_session_date == TODAY

    def test_scenario_same_day(self):
        updated = apply_session(_profile(5, TODAY), TODAY)
        assert updated.current_streak == 5
        assert updated.last_session_date == TODAY

    def test_scenario_gap(self):
        updated = apply_session(_profile(5, date(2024, 3, 5)), TODAY)
        assert updated.current_streak == 1
        assert updated.last_session_date == TODAY

    def test_scenario_new_user(self):
        updated = apply_session(_profile(0, None), TODAY)
        assert updated.current_streak == 1
        assert updated.last_session_date == TODAY

    def test_other_fields_untouched_and_input_not_mutated(self):
        original = _profile(2, YESTERDAY)
        updated = apply_session(original, TODAY)
        assert updated.full_name == "Abebe"
        assert original.current_streak == 2
        assert original.last_session_date == YESTERDAY


class TestDateUtilities:
    def test_previous_day_crosses_year(self):
        assert previous_day(date(2024, 1, 1)) == date(2023, 12, 31)

    def test_parse_session_date_variants(self):
        assert parse_session_date(None) is None
        assert parse_session_date("") is None
        assert parse_session_date("2024-03-10") == TODAY
        assert parse_session_date("2024-03-10T23:59:00+00:00") == TODAY
        assert parse_session_date(datetime(2024, 3, 10, 8, 0)) == TODAY
        assert parse_session_date(TODAY) == TODAY

    def test_last_n_days_oldest_first(self):
        days = last_n_days(TODAY, 3)
        assert days == [date(2024, 3, 8), date(2024, 3, 9), TODAY]

    def test_today_in_respects_timezone(self):
        tz = ZoneInfo("Pacific/Kiritimati")
        before = datetime.now(tz).date()
        result = today_in(tz)
        after = datetime.now(tz).date()
        assert result in (before, after)

    def test_today_in_defaults_to_utc(self):
        before = datetime.now(timezone.utc).date()
        result = today_in()
        after = datetime.now(timezone.utc).date()
        assert result in (before, after)


class TestDedupeSessionDates:
    def test_dedupes_same_day(self):
        dates = dedupe_session_dates(["2024-03-10", "2024-03-10", "2024-03-08"])
        assert dates == [TODAY, date(2024, 3, 8)]

    def test_strictly_descending(self):
        dates = dedupe_session_dates(["2024-03-01", "2024-03-09", "2024-03-05", "2024-03-09"])
        assert all(a > b for a, b in zip(dates, dates[1:]))

    def test_empty(self):
        assert dedupe_session_dates([]) == []


class TestRecomputeStreak:
    def test_contiguous_run_ending_today(self):
        dates = [TODAY - timedelta(days=i) for i in range(4)]
        assert recompute_streak(dates, TODAY) == (4, TODAY)

    def test_gap_restarts_count(self):
        dates = ["2024-03-01", "2024-03-02", "2024-03-05", "2024-03-06", "2024-03-06"]
        assert recompute_streak(dates, TODAY) == (2, date(2024, 3, 6))

    def test_no_sessions(self):
        assert recompute_streak([], TODAY) == (0, None)

    def test_future_dates_ignored(self):
        dates = [YESTERDAY, TODAY + timedelta(days=2)]
        assert recompute_streak(dates, TODAY) == (1, YESTERDAY)


class TestStreakCalendar:
    def test_marks_done_days(self):
        cal = streak_calendar(["2024-03-10", "2024-03-08", "2024-03-01"], TODAY)
        assert len(cal) == 7
        assert cal[0]["date"] == "2024-03-04"
        assert cal[-1] == {"date": "2024-03-10", "done": True}
        assert [c["done"] for c in cal] == [False, False, False, False, True, False, True]
