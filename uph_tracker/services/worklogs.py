"""
Storage-side helpers around the calculation engine.

This is the "caller" the engine talks about: it copies rows into records,
keeps `hours_worked` derived, and writes GoalReached events back onto
`WorkLog.goal_met_times` with set-if-absent semantics.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from sqlalchemy.orm import Session

from .. import models
from ..config import settings
from .audit import record_audit
from .goal_met import GoalReached, apply_goal_reached, format_instant, pending_goal_events
from .rates import final_uph
from .records import TargetRecord, WorkLogRecord
from .shift_time import hours_worked, is_live, wall_clock
from .targets import active_target, resolve_target

logger = logging.getLogger(__name__)


def load_targets(db: Session) -> list[TargetRecord]:
    return [TargetRecord.from_row(t) for t in db.query(models.UPHTarget).all()]


def refresh_hours_worked(row: models.WorkLog) -> None:
    row.hours_worked = round(hours_worked(WorkLogRecord.from_row(row)), 2)


def log_out(row: models.WorkLog) -> dict:
    return {
        "id": row.id,
        "date": row.date,
        "start_time": row.start_time,
        "end_time": row.end_time,
        "break_minutes": row.break_minutes,
        "training_minutes": row.training_minutes,
        "hours_worked": row.hours_worked,
        "documents_completed": row.documents_completed,
        "video_sessions_completed": row.video_sessions_completed,
        "target_id": row.target_id,
        "notes": row.notes,
        "is_finalized": row.is_finalized,
        "goal_met_times": dict(row.goal_met_times or {}),
    }


def find_log_for_date(db: Session, day: str) -> models.WorkLog | None:
    return db.query(models.WorkLog).filter(models.WorkLog.date == day).first()


def get_or_create_today_log(db: Session, now: datetime) -> tuple[models.WorkLog, bool]:
    today = wall_clock(now).date().isoformat()
    row = find_log_for_date(db, today)
    if row:
        return row, False

    targets = load_targets(db)
    fallback = active_target(targets)
    row = models.WorkLog(
        date=today,
        start_time=settings.default_start_time,
        end_time=settings.default_end_time,
        break_minutes=settings.default_break_minutes,
        training_minutes=settings.default_training_minutes,
        documents_completed=0,
        video_sessions_completed=0,
        target_id=fallback.id if fallback else None,
        is_finalized=False,
        goal_met_times={},
    )
    refresh_hours_worked(row)
    db.add(row)
    return row, True


def persist_goal_events(db: Session, row: models.WorkLog,
                        events: Iterable[GoalReached]) -> list[GoalReached]:
    """Write events set-if-absent. Returns the events that actually changed the row."""
    current = dict(row.goal_met_times or {})
    applied = []
    for event in events:
        if event.target_id in current:
            continue
        current = apply_goal_reached(current, event)
        applied.append(event)
        met_at = format_instant(event.at)
        record_audit(db, "GOAL_REACHED", "WorkLog", row.id, f"target={event.target_id} at={met_at}")
        logger.info("[goals] target reached", extra={
            "work_log_id": row.id, "target_id": event.target_id, "met_at": met_at})
    if applied:
        # reassign so the JSON column is flagged dirty
        row.goal_met_times = current
    return applied


def evaluate_and_persist(db: Session, row: models.WorkLog, targets: Sequence[TargetRecord],
                         now: datetime) -> list[GoalReached]:
    record = WorkLogRecord.from_row(row)
    if not is_live(record, now):
        return []
    return persist_goal_events(db, row, pending_goal_events(record, targets, now))


def sweep_goal_met(db: Session, now: datetime) -> int:
    """Persist pending goal events for every live log (today's, or last night's overnight shift)."""
    today = wall_clock(now).date()
    candidates = [today.isoformat(), (today - timedelta(days=1)).isoformat()]
    rows = (
        db.query(models.WorkLog)
        .filter(models.WorkLog.date.in_(candidates), models.WorkLog.is_finalized == False)  # noqa: E712
        .all()
    )
    targets = load_targets(db)
    written = 0
    for row in rows:
        try:
            written += len(evaluate_and_persist(db, row, targets, now))
            db.commit()
        except Exception:
            # log and continue; one bad row must not stop the sweep
            db.rollback()
            logger.exception("[goals] sweep failed", extra={"work_log_id": row.id})
    return written


def finalize_previous_days(db: Session, today: date) -> int:
    rows = (
        db.query(models.WorkLog)
        .filter(models.WorkLog.date < today.isoformat(), models.WorkLog.is_finalized == False)  # noqa: E712
        .all()
    )
    for row in rows:
        row.is_finalized = True
        record_audit(db, "WORKLOG_FINALIZE", "WorkLog", row.id, "auto-finalized after day end")
    db.commit()
    if rows:
        logger.info("[finalize] closed %d log(s) before %s", len(rows), today.isoformat())
    return len(rows)


def is_previous(row: models.WorkLog, today: str) -> bool:
    return row.date < today or (row.date == today and bool(row.is_finalized))


def avg_uph_for(row: models.WorkLog, targets: Sequence[TargetRecord]) -> float:
    record = WorkLogRecord.from_row(row)
    return final_uph(record, resolve_target(record.target_id, targets))


def weekly_average(rows: Iterable[models.WorkLog], targets: Sequence[TargetRecord],
                   ref_date: date) -> dict:
    """Average daily UPH from Monday of ref_date's week up to ref_date, skipping days without UPH."""
    week_start = ref_date - timedelta(days=ref_date.weekday())
    start_s, end_s = week_start.isoformat(), ref_date.isoformat()

    breakdown = []
    for row in rows:
        if not (start_s <= (row.date or "") <= end_s):
            continue
        uph = avg_uph_for(row, targets)
        if uph <= 0:
            continue
        day = datetime.strptime(row.date, "%Y-%m-%d")
        breakdown.append({"date": row.date, "day": day.strftime("%a"), "uph": uph})

    breakdown.sort(key=lambda d: d["date"])
    average = round(sum(d["uph"] for d in breakdown) / len(breakdown), 2) if breakdown else 0.0
    return {
        "week_start": start_s,
        "week_end": end_s,
        "average_uph": average,
        "days_counted": len(breakdown),
        "daily": breakdown,
    }


def analytics_summary(rows: Iterable[models.WorkLog], targets: Sequence[TargetRecord],
                      start: date | None = None, end: date | None = None,
                      target: TargetRecord | None = None) -> dict:
    """
    Daily series and totals over a date range. UPH is measured against `target`
    when given, otherwise against each log's own target with the active fallback.
    """
    start_s = start.isoformat() if start else None
    end_s = end.isoformat() if end else None

    daily = []
    for row in sorted(rows, key=lambda r: r.date or ""):
        if start_s and row.date < start_s:
            continue
        if end_s and row.date > end_s:
            continue
        record = WorkLogRecord.from_row(row)
        measured = target or resolve_target(record.target_id, targets)
        daily.append({
            "date": row.date,
            "documents": row.documents_completed or 0,
            "videos": row.video_sessions_completed or 0,
            "hours_worked": round(hours_worked(record), 2),
            "uph": final_uph(record, measured),
        })

    with_uph = [d["uph"] for d in daily if d["uph"] > 0]
    return {
        "start": start_s,
        "end": end_s,
        "target_id": target.id if target else None,
        "total_documents": sum(d["documents"] for d in daily),
        "total_videos": sum(d["videos"] for d in daily),
        "total_hours": round(sum(d["hours_worked"] for d in daily), 2),
        "average_uph": round(sum(with_uph) / len(with_uph), 2) if with_uph else 0.0,
        "days_logged": len(daily),
        "daily": daily,
    }
