"""Extraction status lookups for uploaded bid PDFs."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.exceptions import PdfUploadNotFoundError
from bidsmart.repositories.pdf_upload_repository import PdfUploadRepository
from bidsmart.repositories.project_repository import ProjectRepository
from bidsmart.schemas.project import ExtractionStatusResponse
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

STATUS_PROGRESS = {
    "uploaded": 0,
    "processing": 50,
    "extracted": 100,
    "verified": 100,
    "review_needed": 90,
    "failed": 0,
}


def progress_for_status(status: str) -> int:
    return STATUS_PROGRESS.get(status, 0)


class UploadService:
    """Reports how far an upload has progressed through extraction."""

    def __init__(self, db_session: AsyncSession):
        self.upload_repo = PdfUploadRepository(db_session)
        self.project_repo = ProjectRepository(db_session)

    async def get_extraction_status(self, pdf_upload_id: UUID, user_id: UUID) -> ExtractionStatusResponse:
        """Return the extraction status of an upload the user can see.

        Raises:
            PdfUploadNotFoundError: If the upload does not exist or belongs to
                another user's project
        """
        upload = await self.upload_repo.get_by_id(pdf_upload_id)
        if upload is None:
            raise PdfUploadNotFoundError("PDF upload not found")

        project = await self.project_repo.get_by_id(upload.project_id)
        if project is None or (project.user_id != user_id and not project.is_public_demo):
            LOGGER.warning(f"User {user_id} requested status of foreign upload {pdf_upload_id}")
            raise PdfUploadNotFoundError("PDF upload not found")

        return ExtractionStatusResponse(
            pdf_upload_id=upload.id,
            status=upload.status,
            progress=progress_for_status(upload.status),
            confidence=upload.extraction_confidence,
            bid_id=upload.extracted_bid_id,
            error=upload.error_message,
            mindpal_status=upload.mindpal_status,
            processing_started_at=upload.processing_started_at,
            processing_completed_at=upload.processing_completed_at,
            retry_count=upload.retry_count or 0,
        )
