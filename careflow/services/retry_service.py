"""
Retry sweeper for dead-lettered employee syncs

pending_retry -> resolved                  (re-drive succeeded)
pending_retry -> pending_retry, retries+1  (failed, ceiling not reached)
pending_retry -> manual_review_required    (failed, retries reached the ceiling)
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careflow.core.errors import AppError, DependencyError
from careflow.models.failed_sync import FailedSync, FailedSyncStatus
from careflow.services.employee_sync_service import handle_sync
from careflow.services.role_mapping_service import RoleMappingCache
from careflow.services.sync_hooks import EmployeeLifecycleHooks

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3


@dataclass
class RetrySweepReport:
    processed: int = 0
    resolved: int = 0
    retried: int = 0
    escalated: int = 0


def get_retry_candidates(db: Session, max_retries: int = DEFAULT_MAX_RETRIES) -> List[FailedSync]:
    """
    Raises:
        DependencyError: candidates could not be read
    """
    try:
        return (
            db.query(FailedSync)
            .filter(
                FailedSync.status == FailedSyncStatus.PENDING_RETRY.value,
                FailedSync.retries < max_retries,
            )
            .order_by(FailedSync.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Failed to fetch failed syncs: {e.__class__.__name__}")


def record_retry_failure(failed_sync: FailedSync, max_retries: int = DEFAULT_MAX_RETRIES) -> bool:
    """
    Count one more failed attempt. Returns True when the entry was escalated
    to manual review.
    """
    failed_sync.retries = (failed_sync.retries or 0) + 1
    if failed_sync.retries >= max_retries:
        failed_sync.status = FailedSyncStatus.MANUAL_REVIEW_REQUIRED.value
        return True
    return False


def retry_failed_syncs(
    db: Session,
    cache: RoleMappingCache,
    max_retries: int = DEFAULT_MAX_RETRIES,
    hooks: Optional[EmployeeLifecycleHooks] = None,
) -> RetrySweepReport:
    """
    Re-drive every pending_retry entry below the retry ceiling, one at a time.

    A failure on one entry (re-drive or bookkeeping) is logged and the sweep
    moves on.

    Raises:
        DependencyError: the candidate set could not be read
    """
    report = RetrySweepReport()
    candidates = get_retry_candidates(db, max_retries)
    candidate_ids = [c.id for c in candidates]
    logger.info("Retry sweep starting with %d candidate(s)", len(candidate_ids))

    for failed_sync_id in candidate_ids:
        report.processed += 1
        try:
            failed_sync = db.get(FailedSync, failed_sync_id)
            if failed_sync is None:
                continue
            payload = failed_sync.payload
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Could not load failed_sync %s: %s", failed_sync_id, e)
            continue

        try:
            handle_sync(db, payload, cache, hooks=hooks)
        except AppError as e:
            _mark_failed(db, failed_sync_id, e.message, max_retries, report)
            continue
        except Exception as e:
            logger.exception("Unexpected error re-driving failed_sync %s", failed_sync_id)
            _mark_failed(db, failed_sync_id, str(e), max_retries, report)
            continue

        try:
            failed_sync = db.get(FailedSync, failed_sync_id)
            if failed_sync is None:
                db.commit()
                logger.warning("failed_sync %s disappeared before it could be marked resolved", failed_sync_id)
                continue
            failed_sync.status = FailedSyncStatus.RESOLVED.value
            db.commit()
            report.resolved += 1
            logger.info("failed_sync %s resolved", failed_sync_id)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Could not mark failed_sync %s resolved: %s", failed_sync_id, e)

    logger.info(
        "Retry sweep finished: processed=%d resolved=%d retried=%d escalated=%d",
        report.processed, report.resolved, report.retried, report.escalated,
    )
    return report


def _mark_failed(
    db: Session,
    failed_sync_id: int,
    error_message: str,
    max_retries: int,
    report: RetrySweepReport,
) -> None:
    try:
        db.rollback()
        failed_sync = db.get(FailedSync, failed_sync_id)
        if failed_sync is None:
            logger.warning("failed_sync %s disappeared before its retry failure was recorded", failed_sync_id)
            return
        escalated = record_retry_failure(failed_sync, max_retries)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Could not record retry failure for failed_sync %s: %s", failed_sync_id, e)
        return

    if escalated:
        report.escalated += 1
        logger.warning(
            "failed_sync %s needs manual review after %d retries: %s",
            failed_sync_id, failed_sync.retries, error_message,
        )
    else:
        report.retried += 1
        logger.info("failed_sync %s retry %d failed: %s", failed_sync_id, failed_sync.retries, error_message)
