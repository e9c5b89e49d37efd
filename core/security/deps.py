"""FastAPI dependencies resolving the user every search is scoped to."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from core.security.jwt import TokenData, verify_token

# Tokens are issued by the gateway's login endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenData:
    """
    Resolve the bearer token into its claims.

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    token_data = verify_token(token)

    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return token_data


async def get_current_user_id(current_user: TokenData = Depends(get_current_user)) -> str:
    """The authenticated user's ID, used as the tenant scope of every search."""
    return current_user.user_id
