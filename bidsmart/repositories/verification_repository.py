"""Repositories for email verification codes and the sessions they unlock."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.database.models import EmailVerification, VerifiedSession
from bidsmart.repositories.base_repository import BaseRepository


class EmailVerificationRepository(BaseRepository[EmailVerification]):
    """Data access for the email_verifications table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, EmailVerification)

    async def count_since(self, email: str, since: datetime) -> int:
        """Codes issued to ``email`` at or after ``since``."""
        query = (
            select(func.count())
            .select_from(EmailVerification)
            .where(EmailVerification.email == email)
            .where(EmailVerification.created_at >= since)
        )
        try:
            return await self.session.scalar(query) or 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting verification codes: {str(e)}", exc_info=True)
            raise

    async def find_valid(self, email: str, code: str, now: datetime) -> Optional[EmailVerification]:
        """Newest unused, unexpired code row matching ``email`` and ``code``."""
        query = (
            select(EmailVerification)
            .where(EmailVerification.email == email)
            .where(EmailVerification.code == code)
            .where(EmailVerification.verified.is_(False))
            .where(EmailVerification.expires_at > now)
            .order_by(EmailVerification.created_at.desc())
            .limit(1)
        )
        rows = await self._fetch_all(query, "looking up verification code")
        return rows[0] if rows else None


class VerifiedSessionRepository(BaseRepository[VerifiedSession]):
    """Data access for the verified_sessions table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, VerifiedSession)
