"""
Authentication schemas
"""
from typing import Optional
from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """Caller identity taken from a verified access token"""
    id: str = Field(..., description="Auth provider user id ('sub' claim)")
    email: Optional[str] = None
    role: Optional[str] = None
