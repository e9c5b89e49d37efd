"""Bearer token handling using python-jose.

Tokens are issued upstream by the gateway. The Search Service only needs
the subject claim, which every search is scoped to.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, Field

from core.config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class TokenData(BaseModel):
    """Claims the Search Service relies on."""

    sub: str = Field(..., min_length=1, description="Authenticated user ID")
    exp: Optional[datetime] = None

    @property
    def user_id(self) -> str:
        return self.sub


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    **claims: Any,
) -> str:
    """
    Issue a signed access token for ``subject``.

    Used by local tooling and tests; production tokens come from the gateway.

    Args:
        subject: User ID to place in the ``sub`` claim
        expires_delta: Optional custom lifetime
        **claims: Extra claims to embed

    Returns:
        The encoded JWT
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {**claims, "sub": subject, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[TokenData]:
    """
    Verify a bearer token's signature and expiry.

    Returns:
        TokenData for a valid token with a non-blank subject, otherwise None
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub.strip():
        return None

    exp = payload.get("exp")
    return TokenData(
        sub=sub,
        exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp is not None else None,
    )
