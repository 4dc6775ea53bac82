import logging

from sqlalchemy.orm import Session

from .. import models

logger = logging.getLogger(__name__)


def record_audit(db: Session, action: str, entity: str, entity_id: str | None = None,
                 details: str | None = None) -> models.AuditLog:
    """Stage an audit row in the caller's transaction; the caller commits."""
    row = models.AuditLog(action=action, entity=entity, entity_id=entity_id, details=details)
    db.add(row)
    logger.info("[audit] %s %s %s", action, entity, entity_id or "-")
    return row


def list_audit(db: Session, limit: int = 100) -> list[dict]:
    rows = (
        db.query(models.AuditLog)
        .order_by(models.AuditLog.timestamp.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": r.id,
            "timestamp": r.timestamp.isoformat(),
            "action": r.action,
            "entity": r.entity,
            "entity_id": r.entity_id,
            "details": r.details,
        }
        for r in rows
    ]
