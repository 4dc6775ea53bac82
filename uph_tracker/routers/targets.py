from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ..deps import get_db, require_api_key
from .. import models, schemas
from ..services.audit import record_audit
from ..services.records import TargetRecord
from ..services.targets import sort_targets
from ..services.units import target_status

router = APIRouter(prefix="/targets", tags=["targets"], dependencies=[Depends(require_api_key)])

def _target_out(t: models.UPHTarget) -> dict:
    return {
        "id": t.id,
        "name": t.name,
        "target_uph": t.target_uph,
        "docs_per_unit": t.docs_per_unit,
        "videos_per_unit": t.videos_per_unit,
        "is_active": t.is_active,
        "status": target_status(TargetRecord.from_row(t)).value,
    }

def _get_or_404(db: Session, target_id: str) -> models.UPHTarget:
    t = db.get(models.UPHTarget, target_id)
    if not t:
        raise HTTPException(404, "Target not found")
    return t

@router.get("")
def list_targets(db: Session = Depends(get_db)):
    rows = {t.id: t for t in db.query(models.UPHTarget).all()}
    ordered = sort_targets([TargetRecord.from_row(t) for t in rows.values()])
    return [_target_out(rows[t.id]) for t in ordered]

@router.post("")
def create_target(payload: schemas.TargetCreate, db: Session = Depends(get_db)):
    # new targets start inactive; activation is an explicit step
    t = models.UPHTarget(is_active=False, **payload.model_dump())
    db.add(t)
    db.flush()
    record_audit(db, "TARGET_CREATE", "UPHTarget", t.id, f"name={t.name} uph={t.target_uph}")
    db.commit(); db.refresh(t)
    return {"ok": True, "target": _target_out(t)}

@router.patch("/{target_id}")
def update_target(target_id: str, payload: schemas.TargetUpdate, db: Session = Depends(get_db)):
    t = _get_or_404(db, target_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for k, v in changes.items():
        setattr(t, k, v)
    record_audit(db, "TARGET_UPDATE", "UPHTarget", t.id, ", ".join(f"{k}={v}" for k, v in changes.items()))
    db.commit(); db.refresh(t)
    return {"ok": True, "target": _target_out(t)}

@router.post("/{target_id}/activate")
def activate_target(target_id: str, db: Session = Depends(get_db)):
    t = _get_or_404(db, target_id)
    if not t.is_active:
        db.query(models.UPHTarget).filter(models.UPHTarget.id != target_id).update(
            {models.UPHTarget.is_active: False}, synchronize_session=False)
        t.is_active = True
        record_audit(db, "TARGET_ACTIVATE", "UPHTarget", t.id, t.name)
        db.commit(); db.refresh(t)
    return {"ok": True, "target": _target_out(t)}

@router.delete("/{target_id}")
def delete_target(target_id: str, db: Session = Depends(get_db)):
    t = _get_or_404(db, target_id)
    if t.is_active:
        raise HTTPException(409, "Cannot delete the currently active target.")
    record_audit(db, "TARGET_DELETE", "UPHTarget", t.id, t.name)
    db.delete(t)
    db.commit()
    return {"ok": True}
