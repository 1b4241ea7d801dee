"""
Audit logging service
"""
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from careflow.models.audit_log import AuditLog
from careflow.utils.datetime_utils import now_utc
from careflow.utils.json_serializer import sanitize_for_json


def log_audit(
    db: Session,
    actor_id: str,
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    details: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        actor_id: ID of the user performing the action ("system" for automated writes)
        action: Action type (e.g., "SUBMIT_LEAVE_REQUEST", "CREATE", "UPDATE")
        entity_type: Table of the affected entity (e.g., "leave_requests")
        entity_id: ID of the affected entity (optional)
        details: Human readable summary (optional)
        meta: Additional metadata as dictionary (optional)

    Returns:
        Created AuditLog instance
    """
    safe_meta = sanitize_for_json(meta) if meta is not None else None

    audit_log = AuditLog(
        actor_id=str(actor_id),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        meta_json=safe_meta,
        created_at=now_utc()
    )
    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)
    return audit_log
