from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, DateTime, Text, UniqueConstraint, String, Index, Boolean, Integer, Float, JSON
from uuid import uuid4
from datetime import datetime

Base = declarative_base()


class UPHTarget(Base):
    __tablename__ = "uph_targets"
    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    name = Column(String, nullable=False)               # "Standard Shift"
    target_uph = Column(Float, nullable=False)          # units per hour to meet goal
    docs_per_unit = Column(Float, nullable=False)       # documents that make one unit
    videos_per_unit = Column(Float, nullable=False)     # video sessions that make one unit
    is_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class WorkLog(Base):
    __tablename__ = "work_logs"
    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    date = Column(String, nullable=False)                # "YYYY-MM-DD", immutable
    start_time = Column(String, nullable=False, default="")   # "HH:MM"
    end_time = Column(String, nullable=False, default="")     # "HH:MM", < start means overnight
    break_minutes = Column(Integer, default=0, nullable=False)
    training_minutes = Column(Integer, default=0, nullable=False)
    hours_worked = Column(Float, default=0.0, nullable=False)  # derived on every write
    documents_completed = Column(Integer, default=0, nullable=False)
    video_sessions_completed = Column(Integer, default=0, nullable=False)
    target_id = Column(String, nullable=True)            # no FK: target may be deleted later
    notes = Column(Text, nullable=True)
    is_finalized = Column(Boolean, default=False, nullable=False)
    goal_met_times = Column(JSON, default=dict, nullable=False)  # {target_id: ISO instant}
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("date", name="uq_work_logs_date"),
        Index("ix_work_logs_date", "date"),
    )


class AuditLog(Base):
    __tablename__ = "audit_logs"
    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    action = Column(String, nullable=False)              # "TARGET_CREATE" | "GOAL_REACHED" | ...
    entity = Column(String, nullable=False)              # "WorkLog" | "UPHTarget" | "System"
    entity_id = Column(String, nullable=True)
    details = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_audit_logs_timestamp", "timestamp"),
    )
