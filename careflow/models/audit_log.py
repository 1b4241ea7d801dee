"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from careflow.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(String, nullable=False, index=True)  # auth provider user id, or "system"
    action = Column(String, nullable=False)  # e.g., "SUBMIT_LEAVE_REQUEST", "CREATE", "UPDATE"
    entity_type = Column(String, nullable=False)  # e.g., "leave_requests", "leave_approval_rules"
    entity_id = Column(Integer, nullable=True)
    details = Column(Text, nullable=True)
    meta_json = Column(JSON, nullable=True)
    # Set explicitly by log_audit (SQLite server defaults are unreliable for tz-aware columns)
    created_at = Column(DateTime(timezone=True), nullable=False)
