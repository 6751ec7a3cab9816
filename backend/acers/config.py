import os
from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

DEFAULT_ORIGINS = ("http://localhost:3000",)


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_service_key: str
    streak_timezone: ZoneInfo
    allowed_origins: tuple[str, ...]
    log_level: str


def _parse_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown STREAK_TIMEZONE: {name!r}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    origins = os.environ.get("ALLOWED_ORIGINS", "")
    return Settings(
        supabase_url=os.environ.get("SUPABASE_URL", ""),
        supabase_service_key=os.environ.get("SUPABASE_SERVICE_KEY", ""),
        # streak days roll over at midnight in this zone
        streak_timezone=_parse_timezone(os.environ.get("STREAK_TIMEZONE", "UTC")),
        allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or DEFAULT_ORIGINS,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
