from pydantic import BaseModel, Field
from datetime import date

class TargetCreate(BaseModel):
    name: str = Field(..., min_length=1)
    target_uph: float = Field(..., gt=0)
    docs_per_unit: float = Field(..., gt=0)
    videos_per_unit: float = Field(..., gt=0)

class TargetUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    target_uph: float | None = Field(default=None, gt=0)
    docs_per_unit: float | None = Field(default=None, gt=0)
    videos_per_unit: float | None = Field(default=None, gt=0)


class WorkLogCreate(BaseModel):
    date: date
    # blank or partial times are allowed; metrics show placeholders until fixed
    start_time: str = Field(default="", max_length=8)
    end_time: str = Field(default="", max_length=8)
    break_minutes: int = Field(default=0, ge=0)
    training_minutes: int = Field(default=0, ge=0)
    documents_completed: int = Field(default=0, ge=0)
    video_sessions_completed: int = Field(default=0, ge=0)
    target_id: str | None = None
    notes: str | None = None

class WorkLogUpdate(BaseModel):
    # no date field: a log's day is immutable
    start_time: str | None = Field(default=None, max_length=8)
    end_time: str | None = Field(default=None, max_length=8)
    break_minutes: int | None = Field(default=None, ge=0)
    training_minutes: int | None = Field(default=None, ge=0)
    documents_completed: int | None = Field(default=None, ge=0)
    video_sessions_completed: int | None = Field(default=None, ge=0)
    target_id: str | None = None
    notes: str | None = None
    clear_goal_met: bool = False

class CountIncrement(BaseModel):
    documents: int = 0          # may be negative to correct a mistake
    videos: int = 0
    target_id: str | None = None
