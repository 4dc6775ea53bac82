import pytz

from conftest import at
from uph_tracker import jobs, models


class TestJobs:

    def test_sweep_job_uses_local_clock(self, db_session, monkeypatch):
        db_session.add(models.UPHTarget(id="t-std", name="Standard", target_uph=10.0,
                                        docs_per_unit=1.0, videos_per_unit=1.0, is_active=True))
        db_session.add(models.WorkLog(id="log-1", date="2024-07-15", start_time="08:00", end_time="16:00",
                                      break_minutes=0, training_minutes=0, documents_completed=80,
                                      video_sessions_completed=0, is_finalized=False, goal_met_times={}))
        db_session.commit()
        monkeypatch.setattr(jobs, "local_now", lambda: pytz.utc.localize(at(12)))

        jobs.sweep_goals_job()

        db_session.expire_all()
        row = db_session.get(models.WorkLog, "log-1")
        assert row.goal_met_times == {"t-std": "2024-07-15T12:00:00+00:00"}

    def test_finalize_job(self, db_session, monkeypatch):
        db_session.add(models.WorkLog(id="old", date="2024-07-14", is_finalized=False, goal_met_times={}))
        db_session.commit()
        monkeypatch.setattr(jobs, "local_now", lambda: pytz.utc.localize(at(0, 5)))

        jobs.finalize_days_job()

        db_session.expire_all()
        assert db_session.get(models.WorkLog, "old").is_finalized is True

    def test_scheduler_registers_jobs_once(self):
        try:
            jobs.start_scheduler()
            jobs.start_scheduler()
            assert sorted(j.id for j in jobs.scheduler.get_jobs()) == ["finalize_days", "sweep_goals"]
        finally:
            jobs.stop_scheduler()
