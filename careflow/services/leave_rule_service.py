"""
Leave approval rule store - reading active rules and rule administration
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careflow.core.constants import AUDIT_CREATE, AUDIT_UPDATE
from careflow.core.errors import DependencyError, NotFoundError
from careflow.models.leave import LeaveApprovalRule
from careflow.schemas.leave import LeaveApprovalRuleCreate, LeaveApprovalRuleUpdate
from careflow.services.audit_service import log_audit

logger = logging.getLogger(__name__)

# Non-nullable columns: an explicit null in an update leaves them unchanged
_REQUIRED_RULE_FIELDS = {"name", "requires_manager_approval", "auto_approve", "is_active", "priority"}


def list_active_rules(db: Session) -> List[LeaveApprovalRule]:
    """
    Active rules in evaluation order: ascending priority, ties by id.

    Raises:
        DependencyError: the rules could not be read
    """
    try:
        return (
            db.query(LeaveApprovalRule)
            .filter(LeaveApprovalRule.is_active.is_(True))
            .order_by(LeaveApprovalRule.priority.asc(), LeaveApprovalRule.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to fetch leave approval rules: %s", e)
        raise DependencyError(f"Failed to fetch leave approval rules: {e}")


def list_rules(db: Session, active_only: Optional[bool] = None) -> List[LeaveApprovalRule]:
    """List rules, optionally filtered by active flag."""
    query = db.query(LeaveApprovalRule)
    if active_only is not None:
        query = query.filter(LeaveApprovalRule.is_active == active_only)
    return query.order_by(LeaveApprovalRule.priority.asc(), LeaveApprovalRule.id.asc()).all()


def get_rule(db: Session, rule_id: int) -> Optional[LeaveApprovalRule]:
    """Get a rule by ID."""
    return db.query(LeaveApprovalRule).filter(LeaveApprovalRule.id == rule_id).first()


def create_rule(db: Session, rule_data: LeaveApprovalRuleCreate, actor_id: str) -> LeaveApprovalRule:
    """Create a rule and audit it."""
    values = rule_data.model_dump()
    if values.get("action") is not None:
        values["action"] = values["action"].value
    rule = LeaveApprovalRule(**values)
    db.add(rule)
    db.commit()
    db.refresh(rule)

    log_audit(
        db=db,
        actor_id=actor_id,
        action=AUDIT_CREATE,
        entity_type="leave_approval_rules",
        entity_id=rule.id,
        details=f"Rule: {rule.name}",
        meta=rule_data.model_dump(),
    )
    return rule


def update_rule(
    db: Session,
    rule_id: int,
    rule_data: LeaveApprovalRuleUpdate,
    actor_id: str,
) -> LeaveApprovalRule:
    """Apply a partial update to a rule and audit the changed fields."""
    rule = get_rule(db, rule_id)
    if not rule:
        raise NotFoundError(f"Leave approval rule with id {rule_id} not found")

    update_dict = rule_data.model_dump(exclude_unset=True)
    for field, value in update_dict.items():
        if value is None and field in _REQUIRED_RULE_FIELDS:
            continue
        if field == "action" and value is not None:
            value = value.value
        setattr(rule, field, value)

    db.commit()
    db.refresh(rule)

    log_audit(
        db=db,
        actor_id=actor_id,
        action=AUDIT_UPDATE,
        entity_type="leave_approval_rules",
        entity_id=rule.id,
        details=f"Rule: {rule.name}",
        meta=update_dict,
    )
    return rule
