"""
Employee schemas
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict

from careflow.models.employee import EmployeeStatus


class EmployeeOut(BaseModel):
    """Synced employee row"""
    id: int
    tenant_id: int
    external_employee_id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    role: str
    status: EmployeeStatus
    right_to_work_status: str
    right_to_work_expiry: Optional[str] = None
    dbs_status: str
    dbs_expiry: Optional[str] = None
    dbs_number: Optional[str] = None
    compliance_data: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
