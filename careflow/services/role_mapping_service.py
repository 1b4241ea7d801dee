"""
Role mappings: storage access and the in-process mapping cache

The cache is an explicit object (one shared instance per process, handed out
by careflow.core.deps) and takes the current time as an argument so expiry can
be tested deterministically.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careflow.core.config import settings
from careflow.core.constants import AUDIT_UPDATE
from careflow.models.role_mapping import RoleMapping
from careflow.schemas.role_mapping import RoleMappingUpsert
from careflow.services.audit_service import log_audit
from careflow.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

# Used whenever the role_mappings table cannot be read
DEFAULT_ROLE_MAPPINGS: Dict[str, str] = {
    "Recruiter": "Manager",
    "HR Manager": "Manager",
    "Care Worker": "Carer",
    "Senior Care Worker": "Senior Carer",
    "Nurse": "Nurse",
    "Admin": "Manager",
}

RoleMappingFetcher = Callable[[Session], Dict[str, str]]


def fetch_role_mappings(db: Session) -> Dict[str, str]:
    """Read the full external -> internal role table."""
    rows = db.query(RoleMapping.external_role, RoleMapping.internal_role).all()
    return {external: internal for external, internal in rows}


class RoleMappingCache:
    """
    Time-bounded cache of the role mapping table.

    A failed fetch returns the fallback table without caching it, so the next
    call tries the store again. Two callers racing past expiry both re-fetch;
    the later write wins, which is harmless.
    """

    def __init__(
        self,
        fetcher: RoleMappingFetcher = fetch_role_mappings,
        ttl_seconds: int = 300,
        fallback: Optional[Dict[str, str]] = None,
        default_role: str = "Carer",
    ):
        self._fetcher = fetcher
        self.ttl = timedelta(seconds=ttl_seconds)
        self.fallback = dict(fallback if fallback is not None else DEFAULT_ROLE_MAPPINGS)
        self.default_role = default_role
        self._mappings: Optional[Dict[str, str]] = None
        self._expires_at: Optional[datetime] = None

    def is_fresh(self, now: datetime) -> bool:
        return self._mappings is not None and self._expires_at is not None and now < self._expires_at

    def get(self, db: Session, now: Optional[datetime] = None) -> Dict[str, str]:
        """Cached mappings, refreshed from the store once expired."""
        now = now or now_utc()
        if self.is_fresh(now):
            return self._mappings
        return self.refresh(db, now)

    def refresh(self, db: Session, now: Optional[datetime] = None) -> Dict[str, str]:
        """Re-read the whole table; on failure fall back to the default table."""
        now = now or now_utc()
        try:
            mappings = self._fetcher(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Error fetching role mappings, using fallback table: %s", e)
            return dict(self.fallback)

        self._mappings = mappings
        self._expires_at = now + self.ttl
        return mappings

    def map_role(self, db: Session, external_role: str, now: Optional[datetime] = None) -> str:
        """Internal role for an external role name; unmapped roles get the default role."""
        return self.get(db, now).get(external_role) or self.default_role

    def invalidate(self) -> None:
        self._mappings = None
        self._expires_at = None


def build_role_mapping_cache() -> RoleMappingCache:
    return RoleMappingCache(
        ttl_seconds=settings.ROLE_MAPPING_CACHE_TTL_SECONDS,
        default_role=settings.DEFAULT_INTERNAL_ROLE,
    )


def list_role_mappings(db: Session) -> List[RoleMapping]:
    return db.query(RoleMapping).order_by(RoleMapping.external_role.asc()).all()


def upsert_role_mapping(
    db: Session,
    data: RoleMappingUpsert,
    actor_id: str,
    cache: Optional[RoleMappingCache] = None,
) -> RoleMapping:
    """Create or replace the mapping for an external role and drop the cached table."""
    mapping = db.query(RoleMapping).filter(RoleMapping.external_role == data.external_role).first()
    previous = mapping.internal_role if mapping else None
    if mapping:
        mapping.internal_role = data.internal_role
    else:
        mapping = RoleMapping(external_role=data.external_role, internal_role=data.internal_role)
        db.add(mapping)
    db.commit()
    db.refresh(mapping)

    if cache is not None:
        cache.invalidate()

    log_audit(
        db=db,
        actor_id=actor_id,
        action=AUDIT_UPDATE,
        entity_type="role_mappings",
        entity_id=mapping.id,
        details=f"{mapping.external_role} -> {mapping.internal_role}",
        meta={"previous": previous, "internal_role": mapping.internal_role},
    )
    return mapping
