"""
Security utilities: access token handling and webhook signatures

Access tokens are issued by the hosted auth provider; this service only
verifies them. create_access_token mints compatible tokens for scripts and tests.
"""
import hashlib
import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from jose import JWTError, jwt

from careflow.core.config import settings
from careflow.core.errors import SignatureError

logger = logging.getLogger(__name__)


def create_access_token(data: Dict, expires_minutes: Optional[int] = None) -> str:
    """Create a JWT access token"""
    to_encode = data.copy()

    if expires_minutes is None:
        expires_minutes = settings.JWT_EXPIRE_MINUTES

    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    if settings.JWT_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = settings.JWT_AUDIENCE

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def decode_token(token: str) -> Dict:
    """Decode and verify a JWT token"""
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        raise ValueError("Invalid token")


def compute_signature(body: bytes, secret: str) -> str:
    """Lowercase hex HMAC-SHA256 of the raw request body"""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_webhook_signature(body: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """
    Verify the sync webhook signature.

    Returns False when verification was skipped because no secret is
    configured, True when the signature matched.

    Raises:
        SignatureError: header missing or signature mismatch
    """
    if not secret:
        logger.warning("SYNC_WEBHOOK_SECRET is not set. Skipping signature verification.")
        return False

    if not signature:
        raise SignatureError(f"Missing {settings.SYNC_SIGNATURE_HEADER} header")

    expected = compute_signature(body, secret)
    if not hmac.compare_digest(expected, signature.strip().lower()):
        raise SignatureError("Invalid webhook signature")
    return True
