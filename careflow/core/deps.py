"""
Dependencies and guards for FastAPI endpoints
"""
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from careflow.core.config import settings
from careflow.core.errors import AuthError, PermissionDeniedError
from careflow.core.security import decode_token
from careflow.db.session import SessionLocal
from careflow.schemas.auth import AuthenticatedUser
from careflow.services.role_mapping_service import RoleMappingCache, build_role_mapping_cache


# auto_error=False so a missing header is reported as AuthError (401), not the default 403
security = HTTPBearer(auto_error=False)

# Shared by every request in this process
role_mapping_cache = build_role_mapping_cache()


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_role_mapping_cache() -> RoleMappingCache:
    return role_mapping_cache


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """
    Identify the caller from the bearer token issued by the auth provider
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Missing authorization header")

    try:
        payload = decode_token(credentials.credentials)
    except ValueError:
        raise AuthError("Invalid token")

    sub_value = payload.get("sub")
    if not sub_value:
        raise AuthError("Invalid token")

    role = payload.get("role")
    metadata = payload.get("user_metadata")
    if isinstance(metadata, dict) and metadata.get("role"):
        role = metadata["role"]

    return AuthenticatedUser(id=str(sub_value), email=payload.get("email"), role=role)


def require_roles(*allowed_roles: str):
    """
    Dependency factory for role-based access control (roles compared case-insensitively)

    Usage:
        @router.get("/admin-only")
        async def endpoint(user: AuthenticatedUser = Depends(require_roles("admin"))):
            ...
    """
    allowed = {r.lower() for r in allowed_roles}

    def role_checker(current_user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if (current_user.role or "").lower() not in allowed:
            raise PermissionDeniedError(
                f"Access denied. Required roles: {sorted(allowed)}"
            )
        return current_user
    return role_checker


def require_rule_admin(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Callers allowed to manage leave rules and role mappings (settings.RULE_ADMIN_ROLES)"""
    return require_roles(*settings.get_rule_admin_roles())(current_user)
