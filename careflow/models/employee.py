"""
Employee model

Rows are owned by the external HR system and written only by the sync pipeline.
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from careflow.db.base import Base


class EmployeeStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    external_employee_id = Column(Integer, unique=True, nullable=False, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=False)
    status = Column(String(20), nullable=False, default=EmployeeStatus.ACTIVE.value)
    right_to_work_status = Column(String, nullable=False, default="Pending")
    right_to_work_expiry = Column(String, nullable=True)
    dbs_status = Column(String, nullable=False, default="Pending")
    dbs_expiry = Column(String, nullable=True)
    dbs_number = Column(String, nullable=True)
    compliance_data = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    leave_requests = relationship("LeaveRequest", back_populates="employee")
