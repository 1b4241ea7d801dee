"""
Main API router
"""
from fastapi import APIRouter

from careflow.api.v1 import (
    health,
    version,
    leaves,
    leave_rules,
    role_mappings,
    sync,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["leaves"])
api_router.include_router(leave_rules.router, prefix="/leave-rules", tags=["leave-rules"])
api_router.include_router(role_mappings.router, prefix="/role-mappings", tags=["role-mappings"])
api_router.include_router(sync.router, prefix="/sync", tags=["employee-sync"])
