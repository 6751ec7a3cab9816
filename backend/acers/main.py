"""
Acers — FastAPI backend
"""
import logging

from fastapi import FastAPI, Header, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import get_settings
from .db import get_client, get_profile, SupabaseProfileStore, SupabaseSessionLog
from .engine.exam import exam_question_count, exam_time_minutes, score_percent
from .engine.streak import streak_calendar
from .models import SessionCreate
from .tracker import StreakTracker

settings = get_settings()

logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="Acers API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)


def get_tracker() -> StreakTracker:
    db = get_client()
    return StreakTracker(SupabaseProfileStore(db), SupabaseSessionLog(db), tz=settings.streak_timezone)


@app.get("/health")
def health():
    try:
        db = get_client()
        db.table("profiles").select("id").limit(1).execute()
        return {"status": "ok", "db": "ok"}
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
        raise HTTPException(status_code=503, detail="DB unavailable")


# ── Auth ──────────────────────────────────────────────────────────────────────

def get_user_id(authorization: str = Header(...)) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing Bearer token")
    return authorization.removeprefix("Bearer ").strip()


def require_user(user_id: str = Depends(get_user_id)) -> str:
    db = get_client()
    if not get_profile(db, user_id):
        raise HTTPException(status_code=404, detail="Profile not found")
    return user_id


# ── Sessions ──────────────────────────────────────────────────────────────────

@app.post("/api/sessions", status_code=200)
@limiter.limit("30/minute")
def log_session(request: Request, body: SessionCreate, user_id: str = Depends(require_user)):
    result = get_tracker().log_session(user_id, body.subject_id, body.score, body.total)
    return {
        "status": "ok" if result.ok else "error",
        "current_streak": result.current_streak,
        "last_session_date": result.last_session_date.isoformat() if result.last_session_date else None,
        "session_recorded": result.session_recorded,
        "percent": score_percent(body.score, body.total),
    }


@app.get("/api/sessions/{profile_user_id}/dates")
def get_session_dates(profile_user_id: str):
    """Distinct recent session dates, most recent first (calendar/heatmap)."""
    dates = get_tracker().get_session_dates_for_user(profile_user_id)
    return {"dates": [d.isoformat() for d in dates]}


# ── Profile ───────────────────────────────────────────────────────────────────

@app.get("/api/profile/{profile_user_id}")
def read_profile(profile_user_id: str):
    db = get_client()
    profile = get_profile(db, profile_user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    tracker = get_tracker()
    dates = tracker.get_session_dates_for_user(profile_user_id)

    return {
        "id": profile.id,
        "full_name": profile.full_name,
        "school_name": profile.school_name,
        "grade": profile.grade,
        "current_streak": profile.current_streak,
        "last_session_date": profile.last_session_date.isoformat() if profile.last_session_date else None,
        "calendar": streak_calendar(dates, tracker.today()),
        "member_since": profile.created_at or "",
    }


# ── Exam mode ─────────────────────────────────────────────────────────────────

@app.get("/api/exam-config/{subject}")
def get_exam_config(subject: str):
    return {
        "subject": subject,
        "question_count": exam_question_count(subject),
        "time_minutes": exam_time_minutes(subject),
    }
