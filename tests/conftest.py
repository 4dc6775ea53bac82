"""
Shared fixtures for the UPH tracker test suite.

Engine tests build `WorkLogRecord` / `TargetRecord` snapshots directly; API
tests run the FastAPI app against an in-memory SQLite database with the
request clock pinned through the `get_now` dependency.
"""
import os
from datetime import datetime

import pytest
import pytz

# must be set before uph_tracker.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["API_KEY"] = "test-key"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["TIMEZONE"] = "UTC"

from uph_tracker.services.records import TargetRecord, WorkLogRecord  # noqa: E402

API_KEY = "test-key"


@pytest.fixture
def make_log():
    """Factory for work-log snapshots; defaults to an 8h day shift with no breaks."""
    def _make(**overrides) -> WorkLogRecord:
        fields = {
            "id": "log-1",
            "date": "2024-07-15",
            "start_time": "08:00",
            "end_time": "16:00",
            "break_minutes": 0,
            "training_minutes": 0,
            "documents_completed": 0,
            "video_sessions_completed": 0,
            "target_id": None,
            "is_finalized": False,
            "goal_met_times": {},
        }
        fields.update(overrides)
        return WorkLogRecord(**fields)
    return _make


@pytest.fixture
def make_target():
    """Factory for targets; defaults to 10 UPH with one document / one video per unit."""
    def _make(**overrides) -> TargetRecord:
        fields = {
            "id": "t-std",
            "name": "Standard",
            "target_uph": 10.0,
            "docs_per_unit": 1.0,
            "videos_per_unit": 1.0,
            "is_active": False,
        }
        fields.update(overrides)
        return TargetRecord(**fields)
    return _make


def at(hour: int, minute: int = 0, day: int = 15) -> datetime:
    """Naive local instant on July <day> 2024."""
    return datetime(2024, 7, day, hour, minute)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def set(self, hour: int, minute: int = 0, day: int = 15) -> datetime:
        self.now = pytz.utc.localize(at(hour, minute, day))
        return self.now


@pytest.fixture
def clock():
    return Clock(pytz.utc.localize(at(12)))


@pytest.fixture
def db_session():
    from uph_tracker import models
    from uph_tracker.deps import SessionLocal, engine

    models.Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        models.Base.metadata.drop_all(bind=engine)


@pytest.fixture
def api(clock):
    from fastapi.testclient import TestClient
    from uph_tracker import models
    from uph_tracker.deps import engine, get_now
    from uph_tracker.main import app

    models.Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_now] = lambda: clock.now
    client = TestClient(app, headers={"x-api-key": API_KEY})
    try:
        yield client
    finally:
        app.dependency_overrides.clear()
        models.Base.metadata.drop_all(bind=engine)


@pytest.fixture
def std_target(api):
    """An active 10 UPH target created through the API."""
    res = api.post("/targets", json={
        "name": "Standard", "target_uph": 10, "docs_per_unit": 1, "videos_per_unit": 1,
    })
    target = res.json()["target"]
    api.post(f"/targets/{target['id']}/activate")
    return target
