"""
Leave models
"""
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    Boolean,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from careflow.db.base import Base


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveApprovalRule(Base):
    """
    Administrator-maintained rule deciding the initial status of a leave request.

    Lower priority evaluates first. Only leave_type and max_duration_days are
    evaluated; min_duration_days and min_days_notice are stored for reference.
    """
    __tablename__ = "leave_approval_rules"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    leave_type = Column(String(50), nullable=True)
    min_duration_days = Column(Integer, nullable=True)
    max_duration_days = Column(Integer, nullable=True)
    min_days_notice = Column(Integer, nullable=True)
    requires_manager_approval = Column(Boolean, nullable=False, default=False)
    auto_approve = Column(Boolean, nullable=False, default=False)
    action = Column(String(20), nullable=True)  # approved / pending / rejected; derived from auto_approve when NULL
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    priority = Column(Integer, nullable=False, default=100, index=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "action IS NULL OR action IN ('approved', 'pending', 'rejected')",
            name="check_leave_approval_rules_action",
        ),
    )

    @property
    def resolved_action(self) -> str:
        if self.action:
            return self.action
        return LeaveStatus.APPROVED.value if self.auto_approve else LeaveStatus.PENDING.value


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(String(50), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_days = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=LeaveStatus.PENDING.value)
    requested_by = Column(String, nullable=False)
    requested_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    employee = relationship("Employee", back_populates="leave_requests")

    __table_args__ = (
        Index('ix_leave_requests_employee_dates', 'employee_id', 'start_date', 'end_date'),
        CheckConstraint('start_date <= end_date', name='check_start_date_le_end_date'),
    )
