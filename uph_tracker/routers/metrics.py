from datetime import date as ddate, datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ..deps import get_db, get_now, require_api_key
from .. import models
from ..services.records import WorkLogRecord
from ..services.scorecard import log_summary
from ..services.shift_time import wall_clock
from ..services.worklogs import (
    analytics_summary,
    evaluate_and_persist,
    find_log_for_date,
    load_targets,
    weekly_average,
)

router = APIRouter(prefix="/metrics", tags=["metrics"], dependencies=[Depends(require_api_key)])

def _summary(db: Session, row: models.WorkLog, now: datetime) -> dict:
    targets = load_targets(db)
    # persist first-time goal hits before reading, so the cards show the locked state
    if evaluate_and_persist(db, row, targets, now):
        db.commit(); db.refresh(row)
    return log_summary(WorkLogRecord.from_row(row), targets, now)

@router.get("/today")
def today_metrics(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    today = wall_clock(now).date().isoformat()
    row = find_log_for_date(db, today)
    if not row:
        return {"date": today, "log": None}
    return {"date": today, "log": _summary(db, row, now)}

@router.get("/logs/{log_id}")
def log_metrics(log_id: str, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    row = db.get(models.WorkLog, log_id)
    if not row:
        raise HTTPException(404, "Work log not found")
    return _summary(db, row, now)

@router.get("/weekly")
def weekly_metrics(date: ddate | None = None, db: Session = Depends(get_db),
                   now: datetime = Depends(get_now)):
    ref = date or wall_clock(now).date()
    rows = db.query(models.WorkLog).all()
    return weekly_average(rows, load_targets(db), ref)

@router.get("/analytics")
def analytics_metrics(start: ddate | None = None, end: ddate | None = None,
                      target_id: str | None = None, db: Session = Depends(get_db)):
    if start and end and start > end:
        raise HTTPException(400, "start must not be after end")
    targets = load_targets(db)
    target = None
    if target_id:
        target = next((t for t in targets if t.id == target_id), None)
        if target is None:
            raise HTTPException(404, "Target not found")
    query = db.query(models.WorkLog)
    if start:
        query = query.filter(models.WorkLog.date >= start.isoformat())
    if end:
        query = query.filter(models.WorkLog.date <= end.isoformat())
    return analytics_summary(query.all(), targets, start, end, target)
