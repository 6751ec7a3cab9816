"""
Recompute a user's streak from the sessions table.

Replays every logged session date through the same streak rule the API uses,
so the profile matches what the live pipeline would have produced. Useful
after a lost concurrent update or a manual data fix. Safe to run multiple
times (idempotent).

Usage:
    cd backend
    SUPABASE_URL=... SUPABASE_SERVICE_KEY=... python scripts/recompute_streak.py <user_id> [--dry-run]

A .env file in the working directory is picked up as well.
"""
import os
import sys

# Add backend/ to path so the acers package imports without an install
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from acers.config import get_settings
from acers.db import get_client, get_profile
from acers.engine.streak import recompute_streak, today_in

PAGE_SIZE = 1000  # Supabase row limit per request


def fetch_all_session_dates(db, user_id: str) -> list[str]:
    """Fetch every session_date for a user in pages."""
    dates = []
    offset = 0
    while True:
        res = (
            db.table("sessions")
            .select("session_date")
            .eq("user_id", user_id)
            .order("session_date")
            .range(offset, offset + PAGE_SIZE - 1)
            .execute()
        )
        batch = res.data or []
        dates.extend(row["session_date"] for row in batch)
        print(f"  fetched {len(dates)} sessions...", end="\r")
        if len(batch) < PAGE_SIZE:
            break
        offset += PAGE_SIZE
    print(f"  fetched {len(dates)} sessions total          ")
    return dates


def run(user_id: str, dry_run: bool = False):
    print(f"\nRecomputing streak for user: {user_id[:8]}...\n")

    db = get_client()
    profile = get_profile(db, user_id)
    if not profile:
        print(f"Profile not found: {user_id}")
        sys.exit(1)
    print(f"  Name: {profile.full_name or '(unnamed)'}")
    print(f"  Current: streak={profile.current_streak} last_session_date={profile.last_session_date}")

    print("\n  Fetching sessions...")
    dates = fetch_all_session_dates(db, user_id)
    if not dates:
        print("  No sessions found — nothing to recompute.")
        return

    today = today_in(get_settings().streak_timezone)
    streak, last = recompute_streak(dates, today)
    unchanged = streak == profile.current_streak and last == profile.last_session_date
    print(f"  Computed: streak={streak} last_session_date={last}{' (unchanged)' if unchanged else ''}")

    if dry_run:
        print("\n  DRY RUN — no changes written.")
        return
    if unchanged:
        return

    db.table("profiles").update({
        "current_streak": streak,
        "last_session_date": last.isoformat() if last else None,
    }).eq("id", user_id).execute()
    print("\nStreak updated.\n")


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if a != "--dry-run"]
    dry = "--dry-run" in sys.argv

    if not args:
        print("Usage: python scripts/recompute_streak.py <user_id> [--dry-run]")
        sys.exit(1)

    run(args[0], dry_run=dry)
