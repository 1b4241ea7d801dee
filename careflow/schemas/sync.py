"""
Employee sync schemas

The webhook payload is parsed into SyncPayload before any business logic runs.
`action` stays a plain string here so an unrecognised action is reported as
"Unknown action" rather than as a schema error.
"""
import enum
from datetime import datetime
from typing import Any, Dict, Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictInt


class SyncAction(str, enum.Enum):
    EMPLOYEE_CREATED = "employee.created"
    EMPLOYEE_UPDATED = "employee.updated"
    EMPLOYEE_DELETED = "employee.deleted"


class ComplianceIn(BaseModel):
    right_to_work_status: Optional[str] = None
    right_to_work_expiry: Optional[str] = None
    dbs_status: Optional[str] = None
    dbs_expiry: Optional[str] = None
    dbs_number: Optional[str] = None


class ExternalEmployeeIn(BaseModel):
    id: StrictInt = Field(..., description="Employee ID in the external HR system")
    full_name: str
    email: EmailStr
    phone: Optional[str] = None
    role: str
    status: str
    compliance: Optional[ComplianceIn] = None


class SyncPayload(BaseModel):
    action: str
    employee: ExternalEmployeeIn
    tenant_id: StrictInt


class SyncResult(BaseModel):
    success: bool = True
    message: str
    action: SyncAction
    external_employee_id: int
    created: bool = False
    data: Optional[Dict[str, Any]] = None


class FailedSyncOut(BaseModel):
    id: int
    payload: Dict[str, Any]
    error_message: str
    retries: int
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FailedSyncListResponse(BaseModel):
    items: List[FailedSyncOut]
    total: int


class RetrySweepResponse(BaseModel):
    success: bool
    message: str
    processed: int
    resolved: int
    retried: int
    escalated: int
