from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True)
class WorkLogRecord:
    """Read-only copy of a work log handed to the calculation engine."""
    id: Optional[str]
    date: str                                   # "YYYY-MM-DD"
    start_time: str = ""                        # "HH:MM"
    end_time: str = ""                          # "HH:MM"
    break_minutes: int = 0
    training_minutes: int = 0
    documents_completed: int = 0
    video_sessions_completed: int = 0
    target_id: Optional[str] = None
    is_finalized: bool = False
    goal_met_times: Mapping[str, str] = field(default_factory=dict)  # target id -> ISO instant

    @classmethod
    def from_row(cls, row) -> "WorkLogRecord":
        return cls(
            id=row.id,
            date=row.date or "",
            start_time=row.start_time or "",
            end_time=row.end_time or "",
            break_minutes=row.break_minutes or 0,
            training_minutes=row.training_minutes or 0,
            documents_completed=row.documents_completed or 0,
            video_sessions_completed=row.video_sessions_completed or 0,
            target_id=row.target_id,
            is_finalized=bool(row.is_finalized),
            goal_met_times=dict(row.goal_met_times or {}),
        )


@dataclass(frozen=True)
class TargetRecord:
    """Read-only copy of a UPH target."""
    id: str
    name: str
    target_uph: float
    docs_per_unit: float
    videos_per_unit: float
    is_active: bool = False

    @classmethod
    def from_row(cls, row) -> "TargetRecord":
        return cls(
            id=row.id,
            name=row.name,
            target_uph=row.target_uph,
            docs_per_unit=row.docs_per_unit,
            videos_per_unit=row.videos_per_unit,
            is_active=bool(row.is_active),
        )
