import csv
import io
import logging
from datetime import datetime
from uuid import uuid4
from typing import Iterable, Sequence

from pydantic import ValidationError
from sqlalchemy.orm import Session

from .. import models, schemas
from .goal_met import parse_instant
from .rates import final_uph
from .records import TargetRecord, WorkLogRecord
from .worklogs import find_log_for_date, log_out, refresh_hours_worked

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1

CSV_HEADERS = [
    "Date", "Start Time", "End Time", "Break Duration (min)", "Training Duration (min)",
    "Net Hours Worked", "Documents Completed", "Video Sessions Completed", "Notes", "Finalized",
    "Target ID", "Target Name", "Target UPH", "Docs Per Unit", "Videos Per Unit", "Avg UPH",
]


def _num(value) -> str:
    return f"{value:.2f}" if isinstance(value, (int, float)) else "N/A"


def worklogs_csv(rows: Iterable[models.WorkLog], targets: Sequence[TargetRecord]) -> str:
    """CSV of logs measured against the target each was logged with (no fallback)."""
    by_id = {t.id: t for t in targets}
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        target = by_id.get(row.target_id)
        avg_uph = final_uph(WorkLogRecord.from_row(row), target) if target else 0.0
        writer.writerow([
            row.date,
            row.start_time,
            row.end_time,
            row.break_minutes,
            row.training_minutes or 0,
            f"{(row.hours_worked or 0.0):.2f}",
            row.documents_completed,
            row.video_sessions_completed,
            row.notes or "",
            "Yes" if row.is_finalized else "No",
            row.target_id or "N/A",
            target.name if target else "N/A",
            _num(target.target_uph) if target else "N/A",
            str(target.docs_per_unit) if target else "N/A",
            str(target.videos_per_unit) if target else "N/A",
            f"{avg_uph:.2f}",
        ])
    return buf.getvalue()


def export_json(db: Session, now: datetime) -> dict:
    targets = db.query(models.UPHTarget).all()
    logs = db.query(models.WorkLog).order_by(models.WorkLog.date.desc()).all()
    return {
        "version": EXPORT_VERSION,
        "exported_at": now.isoformat(),
        "targets": [
            {
                "id": t.id,
                "name": t.name,
                "target_uph": t.target_uph,
                "docs_per_unit": t.docs_per_unit,
                "videos_per_unit": t.videos_per_unit,
                "is_active": t.is_active,
            }
            for t in targets
        ],
        "worklogs": [log_out(r) for r in logs],
    }


def _clean_goal_times(raw) -> dict:
    if not isinstance(raw, dict):
        return {}
    # keep only entries that parse, stored exactly as written
    cleaned = {}
    for target_id, value in raw.items():
        if isinstance(value, str) and parse_instant(value) is not None:
            cleaned[str(target_id)] = value
    return cleaned


def import_json(db: Session, payload: dict) -> dict:
    """Upsert targets by id and work logs by date. Bad entries are skipped and reported."""
    if not isinstance(payload, dict):
        raise ValueError("Import file must contain a JSON object")

    inserted = updated = skipped = 0
    errors: list[str] = []

    activate = None
    for i, item in enumerate(payload.get("targets") or []):
        try:
            data = schemas.TargetCreate.model_validate(item)
            target_id = str(item.get("id") or "").strip() or str(uuid4())
        except (ValidationError, AttributeError) as e:
            errors.append(f"targets[{i}]: {e}")
            skipped += 1
            continue

        t = db.get(models.UPHTarget, target_id)
        if t:
            for k, v in data.model_dump().items():
                setattr(t, k, v)
            updated += 1
        else:
            t = models.UPHTarget(id=target_id, is_active=False, **data.model_dump())
            db.add(t)
            inserted += 1
        if item.get("is_active"):
            activate = t

    if activate is not None:
        # at most one active target, the last one flagged in the file wins
        for other in db.query(models.UPHTarget).filter(models.UPHTarget.is_active == True).all():  # noqa: E712
            other.is_active = False
        activate.is_active = True

    seen: dict[str, models.WorkLog] = {}
    for i, item in enumerate(payload.get("worklogs") or []):
        try:
            data = schemas.WorkLogCreate.model_validate(item)
        except (ValidationError, AttributeError) as e:
            errors.append(f"worklogs[{i}]: {e}")
            skipped += 1
            continue

        day = data.date.isoformat()
        fields = data.model_dump(exclude={"date"})
        row = seen.get(day) or find_log_for_date(db, day)
        if row:
            for k, v in fields.items():
                setattr(row, k, v)
            updated += 1
        else:
            row = models.WorkLog(date=day, **fields)
            db.add(row)
            inserted += 1
        seen[day] = row
        row.is_finalized = bool(item.get("is_finalized", False))
        row.goal_met_times = _clean_goal_times(item.get("goal_met_times"))
        refresh_hours_worked(row)

    db.commit()
    logger.info("[import] inserted=%d updated=%d skipped=%d", inserted, updated, skipped)
    return {"ok": True, "inserted": inserted, "updated": updated, "skipped": skipped,
            "errors_preview": errors[:5]}
