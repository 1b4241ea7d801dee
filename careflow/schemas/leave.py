"""
Leave schemas
"""
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator, field_serializer

from careflow.models.leave import LeaveStatus
from careflow.utils.datetime_utils import inclusive_days, iso_8601_utc


class LeaveRequestDraft(BaseModel):
    """A leave request as submitted, before rules are applied"""
    employee_id: int = Field(..., description="Internal employee ID")
    leave_type: str = Field(..., min_length=1, description="Leave type, e.g. 'sick' or 'annual'")
    start_date: date = Field(..., description="First day of leave")
    end_date: date = Field(..., description="Last day of leave (inclusive)")
    reason: Optional[str] = Field(None, description="Free-text reason")
    total_days: Optional[int] = Field(
        None,
        description="Ignored on input; recomputed as the inclusive day count",
    )

    @model_validator(mode="after")
    def compute_total_days(self) -> "LeaveRequestDraft":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        self.total_days = inclusive_days(self.start_date, self.end_date)
        return self


class LeaveSubmitRequest(BaseModel):
    """Body of POST /leaves/process"""
    leaveRequest: LeaveRequestDraft


class LeaveOut(BaseModel):
    id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    total_days: int
    reason: Optional[str]
    status: LeaveStatus
    requested_by: str
    requested_at: datetime
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("requested_at", "created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveSubmitResponse(BaseModel):
    data: LeaveOut
    status: LeaveStatus
    ruleApplied: Optional[str] = None


class LeaveApprovalRuleBase(BaseModel):
    name: str = Field(..., min_length=1, description="Rule name shown in audit details")
    description: Optional[str] = Field(None, description="What the rule is for")
    leave_type: Optional[str] = Field(None, description="Only match this leave type (any when omitted)")
    min_duration_days: Optional[int] = Field(None, ge=0, description="Stored for reference; not evaluated")
    max_duration_days: Optional[int] = Field(None, ge=0, description="Match only requests up to this many days")
    min_days_notice: Optional[int] = Field(None, ge=0, description="Stored for reference; not evaluated")
    requires_manager_approval: bool = Field(default=False)
    auto_approve: bool = Field(default=False, description="Approve on match when no explicit action is set")
    action: Optional[LeaveStatus] = Field(None, description="Status to assign on match")
    is_active: bool = Field(default=True)
    priority: int = Field(default=100, description="Lower evaluates first")


class LeaveApprovalRuleCreate(LeaveApprovalRuleBase):
    """Schema for creating a rule"""


class LeaveApprovalRuleUpdate(BaseModel):
    """Schema for updating a rule; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    leave_type: Optional[str] = None
    min_duration_days: Optional[int] = Field(None, ge=0)
    max_duration_days: Optional[int] = Field(None, ge=0)
    min_days_notice: Optional[int] = Field(None, ge=0)
    requires_manager_approval: Optional[bool] = None
    auto_approve: Optional[bool] = None
    action: Optional[LeaveStatus] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None


class LeaveApprovalRuleOut(LeaveApprovalRuleBase):
    id: int
    resolved_action: LeaveStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeaveApprovalRuleListResponse(BaseModel):
    items: List[LeaveApprovalRuleOut]
    total: int
