"""
Leave approval rule administration
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from careflow.core.deps import get_db, require_rule_admin
from careflow.core.errors import NotFoundError
from careflow.schemas.auth import AuthenticatedUser
from careflow.schemas.leave import (
    LeaveApprovalRuleCreate,
    LeaveApprovalRuleUpdate,
    LeaveApprovalRuleOut,
    LeaveApprovalRuleListResponse,
)
from careflow.services.leave_rule_service import create_rule, list_rules, get_rule, update_rule

router = APIRouter()


@router.post("", response_model=LeaveApprovalRuleOut, status_code=201)
async def create_rule_endpoint(
    rule_data: LeaveApprovalRuleCreate,
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_rule_admin),
):
    """Create a leave approval rule."""
    return create_rule(db, rule_data, current_user.id)


@router.get("", response_model=LeaveApprovalRuleListResponse)
async def list_rules_endpoint(
    active_only: Optional[bool] = Query(None, description="Filter by active flag"),
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_rule_admin),
):
    """List rules in evaluation order."""
    rules = list_rules(db, active_only=active_only)
    return LeaveApprovalRuleListResponse(
        items=[LeaveApprovalRuleOut.model_validate(r) for r in rules],
        total=len(rules),
    )


@router.get("/{rule_id}", response_model=LeaveApprovalRuleOut)
async def get_rule_endpoint(
    rule_id: int,
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_rule_admin),
):
    rule = get_rule(db, rule_id)
    if not rule:
        raise NotFoundError(f"Leave approval rule with id {rule_id} not found")
    return rule


@router.patch("/{rule_id}", response_model=LeaveApprovalRuleOut)
async def update_rule_endpoint(
    rule_id: int,
    rule_data: LeaveApprovalRuleUpdate,
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_rule_admin),
):
    """Partially update a rule (e.g. deactivate it or change its priority)."""
    return update_rule(db, rule_id, rule_data, current_user.id)
