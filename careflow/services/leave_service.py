"""
Leave request submission: evaluate approval rules, persist, audit
"""
import logging
from datetime import date
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careflow.core.constants import AUDIT_SUBMIT_LEAVE_REQUEST
from careflow.core.errors import DependencyError, PayloadValidationError
from careflow.models.leave import LeaveRequest
from careflow.schemas.auth import AuthenticatedUser
from careflow.schemas.leave import LeaveRequestDraft, LeaveSubmitRequest
from careflow.services.audit_service import log_audit
from careflow.services.leave_rule_service import list_active_rules
from careflow.services.rule_evaluator import LeaveFacts, RuleDecision, evaluate_leave_rules
from careflow.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def parse_leave_submission(body: Any) -> LeaveRequestDraft:
    """
    Parse the raw {"leaveRequest": {...}} body into a draft.

    Raises:
        PayloadValidationError: body is not a valid submission
    """
    try:
        return LeaveSubmitRequest.model_validate(body).leaveRequest
    except ValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise PayloadValidationError(f"Invalid leave request: {messages}")


def build_audit_details(decision: RuleDecision) -> str:
    """'Status: approved, Rule: Auto-approve Short Sick Leave' / 'Status: pending'"""
    details = f"Status: {decision.status.value}"
    if decision.rule_name:
        details += f", Rule: {decision.rule_name}"
    return details


def submit_leave_request(
    db: Session,
    draft: LeaveRequestDraft,
    user: AuthenticatedUser,
    today: Optional[date] = None,
) -> Tuple[LeaveRequest, RuleDecision]:
    """
    Decide the initial status of a leave request and store it.

    Args:
        db: Database session
        draft: Validated leave request (total_days already computed)
        user: Authenticated caller, recorded as requested_by
        today: Reference date for the notice period (defaults to today, UTC)

    Returns:
        (persisted LeaveRequest, rule decision)

    Raises:
        DependencyError: rules could not be read or the request could not be inserted
    """
    submitted_at = now_utc()
    today = today or submitted_at.date()

    rules = list_active_rules(db)
    facts = LeaveFacts(
        leave_type=draft.leave_type,
        total_days=draft.total_days,
        days_notice=(draft.start_date - today).days,
    )
    decision = evaluate_leave_rules(facts, rules)

    leave_request = LeaveRequest(
        employee_id=draft.employee_id,
        leave_type=draft.leave_type,
        start_date=draft.start_date,
        end_date=draft.end_date,
        total_days=draft.total_days,
        reason=draft.reason,
        status=decision.status.value,
        requested_by=user.id,
        requested_at=submitted_at,
    )
    try:
        db.add(leave_request)
        db.commit()
        db.refresh(leave_request)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to insert leave request for employee %s: %s", draft.employee_id, e)
        raise DependencyError(f"Failed to insert leave request: {e.__class__.__name__}")

    logger.info(
        "Leave request %s for employee %s resolved to %s (rule: %s)",
        leave_request.id, leave_request.employee_id, decision.status.value, decision.rule_name,
    )

    # The request exists at this point; a lost audit entry must not fail the submission
    try:
        log_audit(
            db=db,
            actor_id=user.id,
            action=AUDIT_SUBMIT_LEAVE_REQUEST,
            entity_type="leave_requests",
            entity_id=leave_request.id,
            details=build_audit_details(decision),
            meta=_audit_meta(decision),
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Failed to log audit for leave request {leave_request.id}: {e}")

    return leave_request, decision


def _audit_meta(decision: RuleDecision) -> Dict[str, Any]:
    return {
        "status": decision.status,
        "rule_applied": decision.rule_name,
        "rule_id": decision.rule_id,
    }
