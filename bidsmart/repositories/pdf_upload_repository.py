"""Repositories for pdf uploads and their MindPal extraction audit rows."""

from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.database.models import MindpalExtraction, PdfUpload
from bidsmart.repositories.base_repository import BaseRepository


class PdfUploadRepository(BaseRepository[PdfUpload]):
    """Data access for the pdf_uploads table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PdfUpload)

    async def list_by_project(self, project_id: UUID) -> List[PdfUpload]:
        query = (
            select(PdfUpload)
            .where(PdfUpload.project_id == project_id)
            .order_by(PdfUpload.uploaded_at.asc())
        )
        return await self._fetch_all(query, f"listing pdf uploads for project {project_id}")

    async def list_statuses(self, project_id: UUID) -> List[str]:
        """Return the current status of every upload in a project."""
        query = select(PdfUpload.status).where(PdfUpload.project_id == project_id)
        return await self._fetch_all(query, f"reading upload statuses for project {project_id}")


class MindpalExtractionRepository(BaseRepository[MindpalExtraction]):
    """Data access for the mindpal_extractions audit table."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, MindpalExtraction)
