import logging
from datetime import date
from functools import lru_cache
from typing import Protocol

from supabase import create_client, Client

from .config import get_settings
from .engine.streak import parse_session_date
from .models import Profile, SessionRecord

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> Client:
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_service_key)


class ProfileStore(Protocol):
    def get(self, user_id: str) -> Profile | None: ...

    def update(self, user_id: str, updates: dict, expected_last_session_date: date | None = None) -> bool: ...


class SessionLog(Protocol):
    def append(self, record: SessionRecord) -> None: ...

    def query(self, user_id: str, limit: int) -> list[date]: ...


class SupabaseProfileStore:
    def __init__(self, db: Client):
        self.db = db

    def get(self, user_id: str) -> Profile | None:
        res = self.db.table("profiles").select("*").eq("id", user_id).execute()
        return Profile.model_validate(res.data[0]) if res.data else None

    def update(self, user_id: str, updates: dict, expected_last_session_date: date | None = None) -> bool:
        """
        Conditional update: only applies while last_session_date still holds
        the value the caller read. Returns False when another writer got there first.
        """
        query = self.db.table("profiles").update(updates).eq("id", user_id)
        if expected_last_session_date is None:
            query = query.is_("last_session_date", "null")
        else:
            query = query.eq("last_session_date", expected_last_session_date.isoformat())
        res = query.execute()
        return bool(res.data)


class SupabaseSessionLog:
    def __init__(self, db: Client):
        self.db = db

    def append(self, record: SessionRecord) -> None:
        self.db.table("sessions").insert(record.to_row()).execute()

    def query(self, user_id: str, limit: int) -> list[date]:
        res = (
            self.db.table("sessions")
            .select("session_date")
            .eq("user_id", user_id)
            .order("session_date", desc=True)
            .limit(limit)
            .execute()
        )
        return [parse_session_date(row["session_date"]) for row in (res.data or [])]


def get_profile(db: Client, user_id: str) -> Profile | None:
    return SupabaseProfileStore(db).get(user_id)
