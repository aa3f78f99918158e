"""Repositories for product feedback and contractor installation reviews."""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.database.models import ContractorInstallationReview, UserFeedback
from bidsmart.repositories.base_repository import BaseRepository


class UserFeedbackRepository(BaseRepository[UserFeedback]):
    """Data access for the user_feedback table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, UserFeedback)


class ContractorReviewRepository(BaseRepository[ContractorInstallationReview]):
    """Data access for contractor_installation_reviews, one row per project."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ContractorInstallationReview)

    async def get_by_project(self, project_id: UUID) -> Optional[ContractorInstallationReview]:
        rows = await self.find_by(project_id=project_id)
        return rows[0] if rows else None
