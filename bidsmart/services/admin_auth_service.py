"""Admin dashboard login.

A successful login issues a random session token that is valid for 24 hours.
``require_admin`` accepts that token as a bearer credential.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.exceptions import AuthenticationError, DatabaseError
from bidsmart.repositories.admin_repository import AdminSessionRepository, AdminUserRepository
from bidsmart.schemas.auth import AdminIdentity
from bidsmart.utils.best_effort import run_best_effort
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

SESSION_TTL = timedelta(hours=24)
INVALID_CREDENTIALS = "Invalid email or password"


def generate_session_token() -> str:
    """64 hex characters from 32 random bytes."""
    return secrets.token_hex(32)


class AdminAuthService:
    """Password login for admin accounts and lookup of the sessions it issues."""

    def __init__(self, db_session: AsyncSession):
        self.admin_repo = AdminUserRepository(db_session)
        self.session_repo = AdminSessionRepository(db_session)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Check the credentials and open a session.

        Returns:
            ``{session_token, expires_at, admin}``

        Raises:
            AuthenticationError: Unknown email or wrong password, with the same message
            DatabaseError: If the session row cannot be stored
        """
        admin = await self.admin_repo.get_by_email(email)
        if admin is None:
            LOGGER.info(f"Admin login for unknown email {email}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        identity = AdminIdentity(
            id=str(admin.id), email=admin.email, name=admin.name, is_super_admin=admin.is_super_admin
        )
        admin_id = admin.id

        if not await self.admin_repo.verify_password(password, admin.password_hash):
            LOGGER.info(f"Admin password rejected for {email}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        now = datetime.now(timezone.utc)
        session_token = generate_session_token()
        expires_at = now + SESSION_TTL
        try:
            await self.session_repo.create(
                admin_user_id=admin_id, session_token=session_token, expires_at=expires_at
            )
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to create session", original_error=e)

        await run_best_effort("record_admin_login", self.admin_repo.update(admin_id, last_login_at=now))
        LOGGER.info(f"Admin {admin_id} logged in")

        return {
            "session_token": session_token,
            "expires_at": expires_at.isoformat(),
            "admin": identity.model_dump(),
        }

    async def get_session_admin(self, session_token: str) -> Optional[AdminIdentity]:
        """Admin behind an unexpired session token, or None."""
        admin = await self.session_repo.get_active_admin(session_token, datetime.now(timezone.utc))
        if admin is None:
            return None
        return AdminIdentity(
            id=str(admin.id), email=admin.email, name=admin.name, is_super_admin=admin.is_super_admin
        )
