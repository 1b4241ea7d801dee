"""
Employee sync endpoints: inbound webhook, retry sweep, dead-letter inspection
"""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from careflow.core.config import settings
from careflow.core.deps import get_db, get_current_user, get_role_mapping_cache
from careflow.core.errors import AppError, DependencyError
from careflow.core.security import verify_webhook_signature
from careflow.models.failed_sync import FailedSyncStatus
from careflow.schemas.auth import AuthenticatedUser
from careflow.schemas.sync import FailedSyncOut, FailedSyncListResponse, RetrySweepResponse
from careflow.services.dead_letter_service import add_to_dead_letter_queue, list_failed_syncs
from careflow.services.employee_sync_service import handle_sync
from careflow.services.retry_service import retry_failed_syncs
from careflow.services.role_mapping_service import RoleMappingCache

logger = logging.getLogger(__name__)

router = APIRouter()


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("/employee")
async def sync_employee(
    request: Request,
    db: Session = Depends(get_db),
    cache: RoleMappingCache = Depends(get_role_mapping_cache),
):
    """
    Webhook from the external HR system: {action, employee, tenant_id}.

    The body must be signed (HMAC-SHA256, hex) when SYNC_WEBHOOK_SECRET is set.
    Invalid payloads and unknown actions are rejected with 400 and not
    retried; database failures are dead-lettered for the retry sweep.
    """
    body = await request.body()
    verify_webhook_signature(
        body,
        request.headers.get(settings.SYNC_SIGNATURE_HEADER),
        settings.SYNC_WEBHOOK_SECRET,
    )

    try:
        payload = json.loads(body)
    except ValueError:
        return _failure(status.HTTP_400_BAD_REQUEST, "Request body must be valid JSON")

    try:
        result = handle_sync(db, payload, cache)
    except DependencyError as e:
        dead_letter = add_to_dead_letter_queue(db, payload, e.message)
        if not dead_letter.recorded:
            logger.error("Sync failure could not be dead-lettered: %s", dead_letter.error)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)
    except AppError as e:
        return _failure(e.status_code, e.message)

    return {"success": True, "message": result.message, "data": result.data}


@router.post("/retry-failed", response_model=RetrySweepResponse)
async def retry_failed(
    db: Session = Depends(get_db),
    cache: RoleMappingCache = Depends(get_role_mapping_cache),
):
    """
    Re-drive dead-lettered syncs. Invoked by a scheduler; takes no body.
    """
    try:
        report = retry_failed_syncs(db, cache, max_retries=settings.SYNC_MAX_RETRIES)
    except AppError as e:
        logger.error("Error retrying failed syncs: %s", e.message)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

    return RetrySweepResponse(
        success=True,
        message="Retried failed syncs.",
        processed=report.processed,
        resolved=report.resolved,
        retried=report.retried,
        escalated=report.escalated,
    )


@router.get("/failed", response_model=FailedSyncListResponse)
async def list_failed(
    status_filter: Optional[FailedSyncStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Dead-letter entries, newest first (e.g. ?status=manual_review_required)."""
    rows = list_failed_syncs(db, status=status_filter, limit=limit)
    return FailedSyncListResponse(
        items=[FailedSyncOut.model_validate(r) for r in rows],
        total=len(rows),
    )
