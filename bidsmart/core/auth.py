"""Authentication dependencies for FastAPI routes.

User routes take a Supabase access token. Admin routes also accept the
session token issued by the admin login. Server-to-server routes (the
completion notification trigger) take the service role key as a bearer token.
"""

import hmac
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.config import settings
from bidsmart.core.database import get_async_session
from bidsmart.core.jwt import jwt_verifier
from bidsmart.schemas.auth import AdminIdentity, CurrentUser
from bidsmart.services.admin_auth_service import AdminAuthService
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """Get the current authenticated user from JWT token.

    Raises:
        HTTPException: If token is missing, invalid, or expired
    """
    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = await jwt_verifier.verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user = CurrentUser(
        id=claims.sub,
        email=claims.email,
        role=claims.role,
        app_metadata=claims.app_metadata,
        user_metadata=claims.user_metadata,
    )
    LOGGER.debug(f"Authenticated user: {user.id}")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[CurrentUser]:
    """Like ``get_current_user`` but None instead of 401 when no valid JWT is sent."""
    # Admin session tokens are plain hex, Supabase JWTs always contain dots
    if not credentials or "." not in credentials.credentials:
        return None
    try:
        return await get_current_user(credentials)
    except HTTPException:
        return None


async def get_session_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db_session: AsyncSession = Depends(get_async_session),
) -> Optional[AdminIdentity]:
    """Admin behind an unexpired admin login session token, or None."""
    if not credentials or "." in credentials.credentials:
        return None
    return await AdminAuthService(db_session).get_session_admin(credentials.credentials)


def _on_admin_list(email: Optional[str]) -> bool:
    allowed = {address.lower() for address in settings.admin_emails}
    return bool(email) and email.lower() in allowed


async def require_admin(
    session_admin: Optional[AdminIdentity] = Depends(get_session_admin),
    user: Optional[CurrentUser] = Depends(get_optional_user),
) -> AdminIdentity:
    """Allow super admins signed in through the admin login, or Supabase users on the admin list.

    Raises:
        HTTPException: 401 without usable credentials, 403 for anyone else
    """
    if session_admin is not None:
        if session_admin.is_super_admin or _on_admin_list(session_admin.email):
            return session_admin
        LOGGER.warning(f"Admin access denied for admin account {session_admin.id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized. Super admin access required.",
        )

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid admin credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not _on_admin_list(user.email):
        LOGGER.warning(f"Admin access denied for user {user.id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized. Super admin access required.",
        )
    return AdminIdentity(id=user.id, email=user.email, is_super_admin=True)


async def require_service_role(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> None:
    """Require the Supabase service role key as bearer token."""
    expected = settings.supabase_service_role_key
    supplied = credentials.credentials if credentials else ""

    if not expected or not hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        LOGGER.warning("Rejected service call with invalid credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid service credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
