"""Repository for project requirements."""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.database.models import ProjectRequirements
from bidsmart.repositories.base_repository import BaseRepository


class ProjectRequirementsRepository(BaseRepository[ProjectRequirements]):
    """Data access for the one-to-one project_requirements table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ProjectRequirements)

    async def get_by_project(self, project_id: UUID) -> Optional[ProjectRequirements]:
        rows = await self.find_by(project_id=project_id)
        return rows[0] if rows else None

    async def upsert(self, project_id: UUID, values: Dict[str, Any]) -> ProjectRequirements:
        """Create the requirements row or update the existing one."""
        existing = await self.get_by_project(project_id)
        if existing is None:
            return await self.create(project_id=project_id, **values)
        return await self.update(existing.id, **values)
