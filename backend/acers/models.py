from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Profile(BaseModel):
    id: str
    full_name: Optional[str] = None
    school_name: Optional[str] = None
    grade: Optional[int] = None
    current_streak: int = Field(default=0, ge=0)
    last_session_date: Optional[date] = None
    created_at: Optional[str] = None
    model_config = {"extra": "ignore"}

    @field_validator("current_streak", mode="before")
    @classmethod
    def default_missing_streak(cls, v):
        # column is nullable until the first session
        return 0 if v is None else v


class SessionRecord(BaseModel):
    user_id: str
    subject_id: int
    score: int
    total: int
    session_date: date
    created_at: Optional[str] = None   # set by the DB default

    def to_row(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class SessionCreate(BaseModel):
    subject_id: int = Field(gt=0)
    score: int = Field(ge=0)
    total: int = Field(ge=0)

    @model_validator(mode="after")
    def check_score_within_total(self):
        if self.score > self.total:
            raise ValueError("score cannot exceed total")
        return self


class LogSessionResult(BaseModel):
    ok: bool
    current_streak: Optional[int] = None
    last_session_date: Optional[date] = None
    session_recorded: bool = False
    error: Optional[str] = None   # 'lookup_failure' | 'persistence_failure'
