"""Repository for projects."""

from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.database.models import Project
from bidsmart.repositories.base_repository import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Data access for the projects table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Project)

    async def list_for_user(
        self, user_id: UUID, include_public_demos: bool = False
    ) -> List[Project]:
        """List a user's projects, newest first.

        Args:
            user_id: Owner id
            include_public_demos: Also return projects flagged as public demos
        """
        condition = Project.user_id == user_id
        if include_public_demos:
            condition = or_(condition, Project.is_public_demo.is_(True))

        query = select(Project).where(condition).order_by(Project.created_at.desc())
        return await self._fetch_all(query, f"listing projects for user {user_id}")

    async def list_recent(self, limit: int = 100) -> List[Project]:
        query = select(Project).order_by(Project.created_at.desc()).limit(limit)
        return await self._fetch_all(query, "listing recent projects")

    async def list_stuck(
        self, statuses: Sequence[str], created_before: datetime
    ) -> List[Project]:
        """Projects still in one of ``statuses`` that were created before the cutoff."""
        query = (
            select(Project)
            .where(Project.status.in_(list(statuses)))
            .where(Project.created_at < created_before)
            .order_by(Project.created_at.desc())
        )
        return await self._fetch_all(query, "listing stuck projects")

    async def update_status(self, id: UUID, status: str) -> Optional[Project]:
        return await self.update(id, status=status)
