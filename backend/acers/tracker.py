"""
StreakTracker — logs practice sessions and advances the daily study streak.

Store failures never propagate to the caller; they are logged and reported
through LogSessionResult.
"""
import logging
from datetime import date, tzinfo
from typing import Callable

from .db import ProfileStore, SessionLog
from .engine.streak import UTC, apply_session, dedupe_session_dates, today_in
from .models import LogSessionResult, SessionRecord

logger = logging.getLogger(__name__)

SESSION_DATES_LIMIT = 28

LOOKUP_FAILURE = "lookup_failure"
PERSISTENCE_FAILURE = "persistence_failure"


class StreakTracker:
    def __init__(
        self,
        profiles: ProfileStore,
        sessions: SessionLog,
        tz: tzinfo = UTC,
        max_attempts: int = 3,
        clock: Callable[[], date] | None = None,
    ):
        self.profiles = profiles
        self.sessions = sessions
        self.tz = tz
        self.max_attempts = max_attempts
        self._clock = clock

    def today(self) -> date:
        return self._clock() if self._clock else today_in(self.tz)

    def log_session(self, user_id: str, subject_id: int, score: int, total: int) -> LogSessionResult:
        today = self.today()

        try:
            profile = self.profiles.get(user_id)
        except Exception as e:
            logger.error("Profile lookup failed for %s...: %s", user_id[:8], e)
            return LogSessionResult(ok=False, error=LOOKUP_FAILURE)
        if profile is None:
            logger.warning("No profile for %s..., session not logged", user_id[:8])
            return LogSessionResult(ok=False, error=LOOKUP_FAILURE)

        stored, profile_saved = self._save_streak(user_id, profile, today)

        record = SessionRecord(
            user_id=user_id, subject_id=subject_id, score=score, total=total, session_date=today,
        )
        try:
            self.sessions.append(record)
            session_recorded = True
        except Exception as e:
            logger.error("Session insert failed for %s...: %s", user_id[:8], e)
            session_recorded = False

        ok = profile_saved and session_recorded
        if ok:
            logger.info("Session logged for %s...: streak %d", user_id[:8], stored.current_streak)
        return LogSessionResult(
            ok=ok,
            current_streak=stored.current_streak,
            last_session_date=stored.last_session_date,
            session_recorded=session_recorded,
            error=None if ok else PERSISTENCE_FAILURE,
        )

    def _save_streak(self, user_id, profile, today):
        """
        Read-modify-write guarded by a conditional update on last_session_date.
        A lost race re-reads the profile and recomputes from the fresh row.
        Returns (profile as stored, saved); on failure the profile is the last one read.
        """
        updated = apply_session(profile, today)
        for attempt in range(1, self.max_attempts + 1):
            updates = {
                "current_streak": updated.current_streak,
                "last_session_date": today.isoformat(),
            }
            try:
                if self.profiles.update(user_id, updates, expected_last_session_date=profile.last_session_date):
                    return updated, True
                fresh = self.profiles.get(user_id)
            except Exception as e:
                logger.error("Streak update failed for %s...: %s", user_id[:8], e)
                return profile, False

            if fresh is None:
                logger.error("Profile for %s... vanished during streak update", user_id[:8])
                return profile, False
            logger.info("Streak update conflict for %s... (attempt %d), retrying", user_id[:8], attempt)
            profile = fresh
            updated = apply_session(profile, today)

        logger.error("Gave up updating streak for %s... after %d attempts", user_id[:8], self.max_attempts)
        return profile, False

    def get_session_dates_for_user(self, user_id: str) -> list[date]:
        try:
            dates = self.sessions.query(user_id, SESSION_DATES_LIMIT)
        except Exception as e:
            logger.error("Session date query failed for %s...: %s", user_id[:8], e)
            return []
        return dedupe_session_dates(dates)
