"""
Role mapping administration
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from careflow.core.deps import get_db, get_role_mapping_cache, require_rule_admin
from careflow.schemas.auth import AuthenticatedUser
from careflow.schemas.role_mapping import RoleMappingUpsert, RoleMappingOut
from careflow.services.role_mapping_service import (
    RoleMappingCache,
    list_role_mappings,
    upsert_role_mapping,
)

router = APIRouter()


@router.get("", response_model=List[RoleMappingOut])
async def list_role_mappings_endpoint(
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_rule_admin),
):
    return list_role_mappings(db)


@router.put("", response_model=RoleMappingOut)
async def upsert_role_mapping_endpoint(
    data: RoleMappingUpsert,
    db: Session = Depends(get_db),
    cache: RoleMappingCache = Depends(get_role_mapping_cache),
    current_user: AuthenticatedUser = Depends(require_rule_admin),
):
    """Create or replace the mapping for one external role. Takes effect on the next sync."""
    return upsert_role_mapping(db, data, current_user.id, cache=cache)
