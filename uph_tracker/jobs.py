import logging
import pytz
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session
from .config import settings
from .deps import SessionLocal, local_now
from .services.shift_time import wall_clock
from .services.worklogs import finalize_previous_days, sweep_goal_met

logger = logging.getLogger(__name__)

_tz = pytz.timezone(settings.timezone)
scheduler = BackgroundScheduler(timezone=_tz)

def sweep_goals_job():
    # one DB session for the whole run
    db: Session = SessionLocal()
    try:
        written = sweep_goal_met(db, local_now())
        if written:
            logger.info("[jobs] recorded %d goal-reached event(s)", written)
    except Exception:
        # log and continue; the next tick retries
        logger.exception("[jobs] goal sweep failed")
    finally:
        db.close()

def finalize_days_job():
    db: Session = SessionLocal()
    try:
        finalize_previous_days(db, wall_clock(local_now()).date())
    except Exception:
        logger.exception("[jobs] finalize failed")
    finally:
        db.close()

def start_scheduler():
    # Avoid duplicate jobs if reloader starts twice
    if not scheduler.get_jobs():
        scheduler.add_job(sweep_goals_job, "interval", seconds=settings.goal_sweep_seconds,
                          id="sweep_goals", max_instances=1, coalesce=True)
        scheduler.add_job(finalize_days_job, "cron", hour=settings.finalize_hour,
                          minute=settings.finalize_minute, id="finalize_days")
    if not scheduler.running:
        scheduler.start()
    logger.info("[jobs] scheduler started (%s)", settings.timezone)

def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
