"""
Authentication Dependencies

Validates the Supabase access token sent as
"Authorization: Bearer <token>" and returns the current user.

Usage:
    from led_manager.api.auth import get_current_user

    @router.post("/")
    async def protected_route(user: CurrentUser = Depends(get_current_user)):
        ...
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from led_manager.common.logging_setup import get_service_logger

from .supabase import get_supabase

logger = get_service_logger("api.auth")

# Look for "Authorization: Bearer <token>" without auto-raising
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """The authenticated user attached to a request."""
    id: str
    email: Optional[str] = None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    supabase=Depends(get_supabase),
) -> CurrentUser:
    """
    Validate the bearer token with Supabase Auth.

    Raises:
        HTTPException 401: If no token or invalid token
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Please provide a valid access token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        auth_response = supabase.auth.get_user(credentials.credentials)
    except Exception as e:
        logger.warning(f"Auth error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not auth_response or not auth_response.user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentUser(
        id=str(auth_response.user.id),
        email=auth_response.user.email,
    )
