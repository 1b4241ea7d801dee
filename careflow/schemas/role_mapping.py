"""
Role mapping schemas
"""
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict


class RoleMappingUpsert(BaseModel):
    external_role: str = Field(..., min_length=1, description="Role name sent by the external HR system")
    internal_role: str = Field(..., min_length=1, description="Internal care role it maps to")


class RoleMappingOut(BaseModel):
    id: int
    external_role: str
    internal_role: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
