"""
Dead-letter entries for employee syncs that could not be applied
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.sql import func
import enum
from careflow.db.base import Base


class FailedSyncStatus(str, enum.Enum):
    PENDING_RETRY = "pending_retry"
    RESOLVED = "resolved"
    MANUAL_REVIEW_REQUIRED = "manual_review_required"


class FailedSync(Base):
    __tablename__ = "failed_syncs"

    id = Column(Integer, primary_key=True, index=True)
    payload = Column(JSON, nullable=False)
    error_message = Column(Text, nullable=False)
    retries = Column(Integer, nullable=False, default=0)
    status = Column(String(30), nullable=False, default=FailedSyncStatus.PENDING_RETRY.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
