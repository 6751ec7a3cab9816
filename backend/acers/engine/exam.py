"""
Full exam mode settings and score helpers — pure functions, no DB access.

If a subject has fewer questions in the DB than its target count,
the caller loads all available questions.
"""
import math


DEFAULT_QUESTION_COUNT = 60
DEFAULT_TIME_MINUTES = 120

EXAM_QUESTION_COUNT: dict[str, int] = {
    "Biology":     100,
    "Chemistry":   80,
    "Mathematics": 60,
    "Physics":     60,
    "English":     100,
}

EXAM_TIME_MINUTES: dict[str, int] = {
    "Biology":     120,
    "Chemistry":   120,
    "Mathematics": 180,
    "Physics":     120,
    "English":     120,
}


def exam_question_count(subject_name: str) -> int:
    return EXAM_QUESTION_COUNT.get(subject_name, DEFAULT_QUESTION_COUNT)


def exam_time_minutes(subject_name: str) -> int:
    return EXAM_TIME_MINUTES.get(subject_name, DEFAULT_TIME_MINUTES)


def score_percent(score: int, total: int) -> int:
    """Whole-number percentage correct; 0 for an empty session."""
    if total <= 0:
        return 0
    return math.floor(score * 100 / total + 0.5)
