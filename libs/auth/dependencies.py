from typing import Annotated, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import (
    AdminUser,
    AuthUser,
    CoachUser,
    has_permission,
    is_participant_like,
    parse_auth_user,
)
from libs.common.config import get_settings
from libs.common.logging import get_logger

settings = get_settings()
security = HTTPBearer()
logger = get_logger(__name__)


async def get_current_user(
    token: Annotated[HTTPAuthorizationCredentials, Depends(security)]
) -> AuthUser:
    """
    Validate the bearer JWT and return the authenticated principal.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False},
        )
        return parse_auth_user(payload)

    except (JWTError, ValidationError):
        raise credentials_exception


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AdminUser:
    """Ensure the user is an admin."""
    if not isinstance(current_user, AdminUser):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


async def require_coach(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> CoachUser:
    if not isinstance(current_user, CoachUser):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Coach account required",
        )
    return current_user


async def require_participant(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    if not is_participant_like(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Participant account required",
        )
    return current_user


def require_permission(permission: str) -> Callable:
    """Dependency factory that checks a named permission before the handler runs."""

    async def _checker(
        current_user: Annotated[AuthUser, Depends(get_current_user)]
    ) -> AuthUser:
        if not has_permission(current_user, permission):
            logger.warning(
                "Permission %s denied for user %s", permission, current_user.user_id
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {permission}",
            )
        return current_user

    return _checker
