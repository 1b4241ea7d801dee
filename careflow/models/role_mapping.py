"""
Role mapping model

Maps role names used by the external HR system to internal care roles.
"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from careflow.db.base import Base


class RoleMapping(Base):
    __tablename__ = "role_mappings"

    id = Column(Integer, primary_key=True, index=True)
    external_role = Column(String, unique=True, nullable=False, index=True)
    internal_role = Column(String, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
        nullable=False,
    )
