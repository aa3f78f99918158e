"""Starts MindPal analysis for a project's uploaded bid PDFs.

Each upload is sent as its own workflow run whose ``request_id`` is the
upload id, signed the same way the callback is verified. A run that MindPal
rejects marks only its own upload as failed; the project moves to
``analyzing`` as soon as one run was accepted.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.config import settings
from bidsmart.core.exceptions import (
    APIClientError,
    AuthorizationError,
    ConfigurationError,
    ProjectNotFoundError,
    ValidationError,
)
from bidsmart.core.signing import create_callback_payload, generate_signature
from bidsmart.database.models import PdfUpload
from bidsmart.repositories.pdf_upload_repository import PdfUploadRepository
from bidsmart.repositories.project_repository import ProjectRepository
from bidsmart.schemas.project import AnalysisRequest
from bidsmart.services.base_service import BaseService
from bidsmart.services.storage_service import StorageService
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)


def extract_workflow_run_id(result: Dict[str, Any]) -> Optional[str]:
    """Pick the run id out of the MindPal response, whichever key it uses."""
    nested = result.get("data") if isinstance(result.get("data"), dict) else {}
    return (
        result.get("workflowRunId")
        or result.get("workflow_run_id")
        or nested.get("workflow_run_id")
        or result.get("id")
    )


class AnalysisService(BaseService):
    """Service that hands uploaded PDFs to the MindPal workflow."""

    def __init__(
        self,
        db_session: AsyncSession,
        storage_service: Optional[StorageService] = None,
        callback_secret: Optional[str] = None,
    ):
        super().__init__(db_session)
        self.project_repo = ProjectRepository(db_session)
        self.upload_repo = PdfUploadRepository(db_session)
        self.storage_service = storage_service or StorageService()
        self.mindpal = settings.mindpal
        self.callback_secret = (
            callback_secret if callback_secret is not None else settings.mindpal_callback_secret
        )

    def validate(self, project_id: UUID, user_id: UUID, request: AnalysisRequest, now: Optional[datetime] = None):
        if not self.mindpal.api_key:
            raise ConfigurationError("MindPal API key not configured")
        if not self.mindpal.workflow_id:
            raise ConfigurationError("MindPal workflow ID not configured")
        if not self.callback_secret:
            raise ConfigurationError("Server configuration error")

    async def run(
        self,
        project_id: UUID,
        user_id: UUID,
        request: AnalysisRequest,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Send every requested upload to MindPal.

        Args:
            project_id: Project the uploads belong to
            user_id: Caller, who must own the project
            request: Upload ids and the homeowner's priorities
            now: Timestamp to sign, defaults to the current UTC time

        Returns:
            Summary of the started runs

        Raises:
            ProjectNotFoundError: If the project does not exist
            AuthorizationError: If the caller does not own the project
            ValidationError: If an upload is unknown, foreign or unsignable
            APIClientError: If MindPal rejected every run
        """
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project {project_id} not found")
        if project.user_id != user_id:
            raise AuthorizationError("Not authorized to access this project")

        uploads = await self._load_uploads(project_id, request.pdf_upload_ids)
        document_urls = await self._signed_urls(uploads)

        callback_url = settings.mindpal_callback_url
        user_notes = str(request.user_priorities.get("project_details") or "")
        runs: List[Dict[str, Any]] = []

        for upload in uploads:
            timestamp = (now or datetime.now(timezone.utc)).isoformat()
            request_id = str(upload.id)
            signature = generate_signature(
                create_callback_payload(request_id, timestamp), self.callback_secret
            )
            data = {
                self.mindpal.document_urls_field_id: json.dumps([document_urls[upload.id]]),
                self.mindpal.user_priorities_field_id: json.dumps(request.user_priorities),
                self.mindpal.user_notes_field_id: user_notes,
                self.mindpal.project_id_field_id: str(project_id),
                self.mindpal.callback_url_field_id: callback_url,
                self.mindpal.request_id_field_id: request_id,
                self.mindpal.timestamp_field_id: timestamp,
                self.mindpal.signature_field_id: signature,
            }

            try:
                workflow_run_id = await self._call_mindpal(data)
            except APIClientError as e:
                LOGGER.error(f"MindPal rejected upload {upload.id}: {e.message}")
                await self.upload_repo.update(upload.id, status="failed", error_message=e.message)
                runs.append({"pdfUploadId": request_id, "success": False, "error": e.message})
                continue

            await self.upload_repo.update(
                upload.id,
                status="processing",
                mindpal_run_id=workflow_run_id,
                mindpal_status="triggered",
                processing_started_at=datetime.now(timezone.utc),
                error_message=None,
            )
            runs.append({
                "pdfUploadId": request_id,
                "requestId": request_id,
                "workflowRunId": workflow_run_id,
                "success": True,
            })

        started = [run for run in runs if run["success"]]
        if not started:
            raise APIClientError(f"MindPal API failed: {runs[0]['error']}")

        await self.project_repo.update(
            project_id,
            status="analyzing",
            analysis_queued_at=datetime.now(timezone.utc),
            mindpal_run_id=started[0]["workflowRunId"],
        )
        LOGGER.info(
            f"Started MindPal analysis for project {project_id}",
            extra={"started": len(started), "requested": len(uploads)},
        )

        return {
            "success": True,
            "projectId": str(project_id),
            "requestId": started[0]["requestId"],
            "workflowRunId": started[0]["workflowRunId"],
            "callbackUrl": callback_url,
            "pdfCount": len(started),
            "runs": runs,
            "message": "Analysis started successfully",
        }

    async def _load_uploads(self, project_id: UUID, upload_ids: List[UUID]) -> List[PdfUpload]:
        uploads = []
        for upload_id in upload_ids:
            upload = await self.upload_repo.get_by_id(upload_id)
            if upload is None:
                raise ValidationError(f"PDF upload {upload_id} not found")
            if upload.project_id != project_id:
                raise ValidationError(
                    f"PDF {upload_id} belongs to project {upload.project_id}, not {project_id}"
                )
            uploads.append(upload)
        return uploads

    async def _signed_urls(self, uploads: List[PdfUpload]) -> Dict[UUID, str]:
        urls = {}
        for upload in uploads:
            try:
                urls[upload.id] = await self.storage_service.create_signed_url(upload.file_path)
            except APIClientError as e:
                raise ValidationError(
                    f"URL generation failed: Failed to generate signed URL for {upload.id}",
                    original_error=e,
                )
        return urls

    async def _call_mindpal(self, data: Dict[str, str]) -> Optional[str]:
        """POST one workflow run and return its run id.

        Raises:
            APIClientError: On transport errors or a non-2xx response
        """
        url = f"{self.mindpal.api_endpoint}?workflow_id={self.mindpal.workflow_id}"
        headers = {
            "accept": "application/json",
            "x-api-key": self.mindpal.api_key,
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    headers=headers,
                    json={"data": data},
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            raise APIClientError(f"MindPal API error: {str(e)}", original_error=e)

        if response.status_code >= 400:
            LOGGER.error(
                f"MindPal API error: {response.text}",
                extra={"status_code": response.status_code},
            )
            raise APIClientError(f"MindPal API error: {response.status_code}")

        return extract_workflow_run_id(response.json())
