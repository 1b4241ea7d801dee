"""
Dead-letter queue for employee syncs

Recording is best effort: callers get a DeadLetterResult back and this
module never raises, so a lost entry cannot break the request that failed.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from careflow.models.failed_sync import FailedSync, FailedSyncStatus
from careflow.utils.json_serializer import sanitize_for_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeadLetterResult:
    recorded: bool
    failed_sync_id: Optional[int] = None
    error: Optional[str] = None


def add_to_dead_letter_queue(db: Session, payload: Any, error_message: str) -> DeadLetterResult:
    """Store a failed payload with status pending_retry and zero retries."""
    try:
        # The session may still hold the failed transaction
        db.rollback()
        entry = FailedSync(
            payload=sanitize_for_json(payload),
            error_message=error_message,
            retries=0,
            status=FailedSyncStatus.PENDING_RETRY.value,
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
    except Exception as e:
        logger.error("Error adding to dead-letter queue: %s", e)
        try:
            db.rollback()
        except Exception as rollback_error:
            logger.error("Rollback after dead-letter failure also failed: %s", rollback_error)
        return DeadLetterResult(recorded=False, error=str(e))

    logger.warning("Sync failure dead-lettered as failed_sync %s: %s", entry.id, error_message)
    return DeadLetterResult(recorded=True, failed_sync_id=entry.id)


def list_failed_syncs(
    db: Session,
    status: Optional[FailedSyncStatus] = None,
    limit: int = 100,
) -> List[FailedSync]:
    """Dead-letter entries, newest first."""
    query = db.query(FailedSync)
    if status is not None:
        query = query.filter(FailedSync.status == status.value)
    return query.order_by(FailedSync.id.desc()).limit(limit).all()
