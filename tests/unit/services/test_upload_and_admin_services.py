"""Tests for extraction status lookups and admin project cleanup."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import SQLAlchemyError

from bidsmart.core.exceptions import APIClientError, PdfUploadNotFoundError
from bidsmart.services.admin_service import STUCK_PROJECT_STATUSES, AdminService
from bidsmart.services.upload_service import UploadService, progress_for_status


class TestProgress:

    @pytest.mark.parametrize(
        "status,progress",
        [
            ("uploaded", 0),
            ("processing", 50),
            ("review_needed", 90),
            ("extracted", 100),
            ("verified", 100),
            ("failed", 0),
            ("something-new", 0),
        ],
    )
    def test_progress(self, status, progress):
        assert progress_for_status(status) == progress


class TestUploadService:

    @pytest.fixture
    def upload(self):
        return SimpleNamespace(
            id=uuid4(),
            project_id=uuid4(),
            status="review_needed",
            extraction_confidence=Decimal("64.5"),
            extracted_bid_id=uuid4(),
            error_message=None,
            mindpal_status="completed",
            processing_started_at=datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc),
            processing_completed_at=datetime(2026, 10, 19, 9, 4, tzinfo=timezone.utc),
            retry_count=None,
        )

    def _service(self, upload, project):
        service = UploadService(MagicMock())
        service.upload_repo = AsyncMock()
        service.upload_repo.get_by_id.return_value = upload
        service.project_repo = AsyncMock()
        service.project_repo.get_by_id.return_value = project
        return service

    async def test_owner_sees_status(self, upload):
        owner = uuid4()
        service = self._service(upload, SimpleNamespace(user_id=owner, is_public_demo=False))

        status = await service.get_extraction_status(upload.id, owner)
        body = status.model_dump(mode="json", by_alias=True)

        assert body["pdfUploadId"] == str(upload.id)
        assert body["status"] == "review_needed"
        assert body["progress"] == 90
        assert body["bidId"] == str(upload.extracted_bid_id)
        assert body["retryCount"] == 0

    async def test_foreign_upload_is_not_found(self, upload):
        service = self._service(upload, SimpleNamespace(user_id=uuid4(), is_public_demo=False))

        with pytest.raises(PdfUploadNotFoundError):
            await service.get_extraction_status(upload.id, uuid4())

    async def test_missing_upload(self, upload):
        service = self._service(None, None)

        with pytest.raises(PdfUploadNotFoundError):
            await service.get_extraction_status(upload.id, uuid4())


class TestAdminService:

    def _service(self):
        storage = MagicMock()
        storage.delete_files = AsyncMock(return_value=None)
        service = AdminService(MagicMock(), storage_service=storage)
        service.project_repo = AsyncMock()
        service.project_repo.delete.return_value = True
        service.upload_repo = AsyncMock()
        service.upload_repo.list_by_project.return_value = [
            SimpleNamespace(id=uuid4(), file_path="p/a.pdf", file_name="a.pdf", status="failed", uploaded_at=None),
        ]
        service.bid_repo = AsyncMock()
        service.bid_repo.list_by_project.return_value = []
        return service

    async def test_delete_removes_files_then_rows(self):
        service = self._service()
        project_id = uuid4()

        result = await service.delete_project(project_id)

        assert result == {"success": True, "projectId": str(project_id)}
        service.storage_service.delete_files.assert_awaited_once_with(["p/a.pdf"])
        service.project_repo.delete.assert_awaited_once_with(project_id)

    async def test_storage_failure_does_not_block_delete(self):
        service = self._service()
        service.storage_service.delete_files.side_effect = APIClientError("Delete failed")

        result = await service.delete_project(uuid4())

        assert result["success"] is True

    async def test_database_failure_is_reported(self):
        service = self._service()
        service.project_repo.delete.side_effect = SQLAlchemyError("deadlock detected")

        result = await service.delete_project(uuid4())

        assert result["success"] is False
        assert "deadlock detected" in result["error"]

    async def test_batch_message(self):
        service = self._service()
        ids = [uuid4(), uuid4(), uuid4()]
        service.project_repo.delete.side_effect = [True, False, True]

        result = await service.delete_projects(ids)

        assert result["success"] is False
        assert result["message"] == "Deleted 2 projects. 1 failed."
        assert result["results"][1] == {"success": False, "projectId": str(ids[1]), "error": "Project not found"}

    async def test_batch_all_succeed(self):
        service = self._service()

        result = await service.delete_projects([uuid4(), uuid4()])

        assert result["success"] is True
        assert result["message"] == "Deleted 2 projects. 0 failed."

    async def test_stuck_projects_use_one_hour_cutoff(self):
        service = self._service()
        service.project_repo.list_stuck.return_value = []
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

        await service.list_stuck_projects(now=now)

        statuses, cutoff = service.project_repo.list_stuck.await_args.args
        assert statuses == STUCK_PROJECT_STATUSES
        assert cutoff == now - timedelta(hours=1)

    async def test_list_includes_uploads_and_bids(self):
        service = self._service()
        project = SimpleNamespace(
            id=uuid4(),
            project_name="Main St",
            status="analyzing",
            created_at=None,
            updated_at=None,
            notification_email=None,
        )
        service.project_repo.list_recent.return_value = [project]

        projects = await service.list_projects()

        assert projects[0]["id"] == str(project.id)
        assert projects[0]["pdf_uploads"][0]["file_name"] == "a.pdf"
        assert projects[0]["bids"] == []
