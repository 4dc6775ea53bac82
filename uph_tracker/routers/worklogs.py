from datetime import date, datetime
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from ..deps import get_db, get_now, require_api_key
from .. import models, schemas
from ..services.audit import record_audit
from ..services.shift_time import wall_clock
from ..services.worklogs import (
    avg_uph_for,
    find_log_for_date,
    get_or_create_today_log,
    is_previous,
    load_targets,
    log_out,
    refresh_hours_worked,
)

router = APIRouter(prefix="/worklogs", tags=["worklogs"], dependencies=[Depends(require_api_key)])

SORTABLE = {"date", "hours_worked", "documents_completed", "video_sessions_completed", "avg_uph"}

# ---------- helpers ----------
def _get_or_404(db: Session, log_id: str) -> models.WorkLog:
    row = db.get(models.WorkLog, log_id)
    if not row:
        raise HTTPException(404, "Work log not found")
    return row

def _changes(fields: dict) -> str:
    return ", ".join(f"{k}={v}" for k, v in fields.items())

# ---------- endpoints ----------
@router.get("")
def list_worklogs(
    start: date | None = None,
    end: date | None = None,
    q: str | None = None,
    previous: bool = False,
    sort: str = "date",
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=200),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    if sort not in SORTABLE:
        raise HTTPException(400, f"sort must be one of {sorted(SORTABLE)}")

    query = db.query(models.WorkLog)
    if start:
        query = query.filter(models.WorkLog.date >= start.isoformat())
    if end:
        query = query.filter(models.WorkLog.date <= end.isoformat())
    rows = query.all()

    today = wall_clock(now).date().isoformat()
    if previous:
        rows = [r for r in rows if is_previous(r, today)]
    if q:
        needle = q.strip().lower()
        rows = [r for r in rows if needle in r.date or needle in (r.notes or "").lower()]

    targets = load_targets(db)
    uph = {r.id: avg_uph_for(r, targets) for r in rows}
    if sort == "avg_uph":
        rows.sort(key=lambda r: uph[r.id], reverse=(direction == "desc"))
    else:
        rows.sort(key=lambda r: getattr(r, sort) or 0, reverse=(direction == "desc"))

    total = len(rows)
    chunk = rows[(page - 1) * page_size: page * page_size]
    return {
        "total": total,
        "page": page,
        "pages": (total + page_size - 1) // page_size,
        "items": [{**log_out(r), "avg_uph": uph[r.id]} for r in chunk],
    }

@router.get("/{log_id}")
def get_worklog(log_id: str, db: Session = Depends(get_db)):
    return log_out(_get_or_404(db, log_id))

@router.post("")
def create_worklog(payload: schemas.WorkLogCreate, db: Session = Depends(get_db)):
    day = payload.date.isoformat()
    if find_log_for_date(db, day):
        raise HTTPException(409, f"A work log already exists for {day}")
    row = models.WorkLog(
        date=day,
        is_finalized=False,
        goal_met_times={},
        **payload.model_dump(exclude={"date"}),
    )
    refresh_hours_worked(row)
    db.add(row)
    db.flush()
    record_audit(db, "WORKLOG_CREATE", "WorkLog", row.id, f"date={day}")
    db.commit(); db.refresh(row)
    return {"ok": True, "worklog": log_out(row)}

@router.post("/today/increment")
def increment_today(payload: schemas.CountIncrement, db: Session = Depends(get_db),
                    now: datetime = Depends(get_now)):
    row, created = get_or_create_today_log(db, now)
    row.documents_completed = max(0, (row.documents_completed or 0) + payload.documents)
    row.video_sessions_completed = max(0, (row.video_sessions_completed or 0) + payload.videos)
    if payload.target_id:
        row.target_id = payload.target_id
    db.flush()
    record_audit(db, "WORKLOG_CREATE" if created else "WORKLOG_INCREMENT", "WorkLog", row.id,
                 f"documents{payload.documents:+d} videos{payload.videos:+d}")
    db.commit(); db.refresh(row)
    return {"ok": True, "created": created, "worklog": log_out(row)}

@router.patch("/{log_id}")
def update_worklog(log_id: str, payload: schemas.WorkLogUpdate, db: Session = Depends(get_db)):
    row = _get_or_404(db, log_id)
    fields = payload.model_dump(exclude_unset=True, exclude={"clear_goal_met"})
    for k, v in fields.items():
        if v is None and k not in ("target_id", "notes"):
            continue
        setattr(row, k, v)
    refresh_hours_worked(row)
    # a downward count correction keeps recorded goal times; clearing is explicit
    if payload.clear_goal_met:
        row.goal_met_times = {}
        record_audit(db, "WORKLOG_CLEAR_GOALS", "WorkLog", row.id, "all targets")
    record_audit(db, "WORKLOG_UPDATE", "WorkLog", row.id, _changes(fields))
    db.commit(); db.refresh(row)
    return {"ok": True, "worklog": log_out(row)}

@router.post("/{log_id}/finalize")
def finalize_worklog(log_id: str, db: Session = Depends(get_db)):
    row = _get_or_404(db, log_id)
    row.is_finalized = True
    record_audit(db, "WORKLOG_FINALIZE", "WorkLog", row.id, f"date={row.date}")
    db.commit(); db.refresh(row)
    return {"ok": True, "worklog": log_out(row)}

@router.post("/{log_id}/reopen")
def reopen_worklog(log_id: str, db: Session = Depends(get_db)):
    row = _get_or_404(db, log_id)
    row.is_finalized = False
    record_audit(db, "WORKLOG_REOPEN", "WorkLog", row.id, f"date={row.date}")
    db.commit(); db.refresh(row)
    return {"ok": True, "worklog": log_out(row)}

@router.delete("/{log_id}/goal-met/{target_id}")
def clear_goal_met(log_id: str, target_id: str, db: Session = Depends(get_db)):
    row = _get_or_404(db, log_id)
    current = dict(row.goal_met_times or {})
    if target_id not in current:
        raise HTTPException(404, "No goal-met record for that target")
    current.pop(target_id)
    row.goal_met_times = current
    record_audit(db, "WORKLOG_CLEAR_GOALS", "WorkLog", row.id, f"target={target_id}")
    db.commit()
    return {"ok": True, "goal_met_times": current}

@router.delete("/{log_id}")
def delete_worklog(log_id: str, db: Session = Depends(get_db)):
    row = _get_or_404(db, log_id)
    record_audit(db, "WORKLOG_DELETE", "WorkLog", row.id, f"date={row.date}")
    db.delete(row)
    db.commit()
    return {"ok": True}
