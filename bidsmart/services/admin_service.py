"""Admin cleanup of abandoned or broken projects."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.exceptions import APIClientError
from bidsmart.database.models import Project
from bidsmart.repositories.bid_repository import ContractorBidRepository
from bidsmart.repositories.pdf_upload_repository import PdfUploadRepository
from bidsmart.repositories.project_repository import ProjectRepository
from bidsmart.services.storage_service import StorageService
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

RECENT_PROJECT_LIMIT = 100
STUCK_PROJECT_STATUSES = ("draft", "uploading", "analyzing")
STUCK_PROJECT_AGE = timedelta(hours=1)


class AdminService:
    """Listing and deletion of projects across all users."""

    def __init__(self, db_session: AsyncSession, storage_service: Optional[StorageService] = None):
        self.project_repo = ProjectRepository(db_session)
        self.upload_repo = PdfUploadRepository(db_session)
        self.bid_repo = ContractorBidRepository(db_session)
        self.storage_service = storage_service or StorageService()

    async def _describe(self, project: Project) -> Dict[str, Any]:
        uploads = await self.upload_repo.list_by_project(project.id)
        bids = await self.bid_repo.list_by_project(project.id)
        return {
            "id": str(project.id),
            "project_name": project.project_name,
            "status": project.status,
            "created_at": project.created_at,
            "updated_at": project.updated_at,
            "notification_email": project.notification_email,
            "pdf_uploads": [
                {"id": str(u.id), "file_name": u.file_name, "status": u.status, "uploaded_at": u.uploaded_at}
                for u in uploads
            ],
            "bids": [
                {"id": str(b.id), "contractor_name": b.contractor_name, "created_at": b.created_at}
                for b in bids
            ],
        }

    async def list_projects(self) -> List[Dict[str, Any]]:
        """The most recent projects of every user, newest first."""
        projects = await self.project_repo.list_recent(limit=RECENT_PROJECT_LIMIT)
        return [await self._describe(project) for project in projects]

    async def list_stuck_projects(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Projects that sat in an in-progress status for more than an hour."""
        cutoff = (now or datetime.now(timezone.utc)) - STUCK_PROJECT_AGE
        projects = await self.project_repo.list_stuck(STUCK_PROJECT_STATUSES, cutoff)
        return [await self._describe(project) for project in projects]

    async def delete_project(self, project_id: UUID) -> Dict[str, Any]:
        """Delete a project with its uploads, bids and stored PDFs.

        Stored files are removed first and only logged on failure; the rows
        are removed through the foreign key cascade.

        Returns:
            ``{success, projectId}`` plus ``error`` when the delete failed
        """
        LOGGER.info(f"Deleting project {project_id} and all related data")
        try:
            uploads = await self.upload_repo.list_by_project(project_id)
            paths = [upload.file_path for upload in uploads if upload.file_path]
            try:
                await self.storage_service.delete_files(paths)
            except APIClientError as e:
                LOGGER.warning(f"Could not remove stored files for project {project_id}: {e.message}")

            deleted = await self.project_repo.delete(project_id)
        except SQLAlchemyError as e:
            LOGGER.error(f"Error deleting project {project_id}: {str(e)}")
            return {"success": False, "projectId": str(project_id), "error": str(e)}

        if not deleted:
            return {"success": False, "projectId": str(project_id), "error": "Project not found"}

        LOGGER.info(f"Successfully deleted project {project_id}")
        return {"success": True, "projectId": str(project_id)}

    async def delete_projects(self, project_ids: Sequence[UUID]) -> Dict[str, Any]:
        # One session is shared, so deletes run one after another.
        results = []
        for project_id in project_ids:
            results.append(await self.delete_project(project_id))

        success_count = sum(1 for result in results if result["success"])
        fail_count = len(results) - success_count
        return {
            "success": fail_count == 0,
            "message": f"Deleted {success_count} projects. {fail_count} failed.",
            "results": results,
        }
