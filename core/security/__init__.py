"""Core security module."""

from core.security.deps import get_current_user, get_current_user_id
from core.security.jwt import TokenData, create_access_token, verify_token

__all__ = [
    "TokenData",
    "create_access_token",
    "get_current_user",
    "get_current_user_id",
    "verify_token",
]
