import json
from datetime import date, datetime
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.orm import Session
from ..deps import get_db, get_now, require_api_key
from .. import models
from ..services.audit import record_audit
from ..services.transfer import export_json, import_json, worklogs_csv
from ..services.worklogs import load_targets

router = APIRouter(tags=["transfer"], dependencies=[Depends(require_api_key)])

@router.get("/export/worklogs.csv")
def export_worklogs_csv(start: date | None = None, end: date | None = None,
                        db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    query = db.query(models.WorkLog)
    if start:
        query = query.filter(models.WorkLog.date >= start.isoformat())
    if end:
        query = query.filter(models.WorkLog.date <= end.isoformat())
    rows = query.order_by(models.WorkLog.date.desc()).all()

    body = worklogs_csv(rows, load_targets(db))
    record_audit(db, "SYSTEM_EXPORT_DATA", "System", None, f"csv rows={len(rows)}")
    db.commit()

    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="worklogs_{stamp}.csv"'},
    )

@router.get("/export/json")
def export_all_json(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    data = export_json(db, now)
    record_audit(db, "SYSTEM_EXPORT_DATA", "System", None,
                 f"json targets={len(data['targets'])} worklogs={len(data['worklogs'])}")
    db.commit()
    return data

@router.post("/import/json")
async def import_all_json(file: UploadFile = File(...), db: Session = Depends(get_db)):
    if not (file.filename or "").lower().endswith(".json"):
        raise HTTPException(400, "Please upload a .json file")

    raw = await file.read()
    try:
        payload = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise HTTPException(400, f"Invalid JSON file: {e}")

    try:
        result = import_json(db, payload)
    except ValueError as e:
        db.rollback()
        raise HTTPException(400, str(e))

    record_audit(db, "SYSTEM_IMPORT_DATA", "System", None,
                 f"inserted={result['inserted']} updated={result['updated']} skipped={result['skipped']}")
    db.commit()
    return result
