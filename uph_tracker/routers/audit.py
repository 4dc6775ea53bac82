from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from ..deps import get_db, require_api_key
from ..services.audit import list_audit

router = APIRouter(prefix="/audit-log", tags=["audit"], dependencies=[Depends(require_api_key)])

@router.get("")
def audit_log(limit: int = Query(100, ge=1, le=1000), db: Session = Depends(get_db)):
    return list_audit(db, limit)
