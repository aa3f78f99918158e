"""Repositories for admin accounts and their login sessions."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.database.models import AdminSession, AdminUser
from bidsmart.repositories.base_repository import BaseRepository


class AdminUserRepository(BaseRepository[AdminUser]):
    """Data access for the admin_users table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AdminUser)

    async def get_by_email(self, email: str) -> Optional[AdminUser]:
        rows = await self.find_by(email=email.lower())
        return rows[0] if rows else None

    async def verify_password(self, password: str, password_hash: str) -> bool:
        """Check a password against a pgcrypto hash with ``crypt`` in the database."""
        try:
            matches = await self.session.scalar(select(func.crypt(password, password_hash) == password_hash))
        except SQLAlchemyError as e:
            self.logger.error(f"Error verifying admin password: {str(e)}", exc_info=True)
            raise
        return bool(matches)


class AdminSessionRepository(BaseRepository[AdminSession]):
    """Data access for the admin_sessions table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AdminSession)

    async def get_active_admin(self, session_token: str, now: datetime) -> Optional[AdminUser]:
        """Admin owning ``session_token`` if the session has not expired yet."""
        query = (
            select(AdminUser)
            .join(AdminSession, AdminSession.admin_user_id == AdminUser.id)
            .where(AdminSession.session_token == session_token)
            .where(AdminSession.expires_at > now)
        )
        rows = await self._fetch_all(query, "looking up admin session")
        return rows[0] if rows else None
