"""Tests for starting MindPal analysis runs."""

import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import httpx
import pytest

from bidsmart.core.exceptions import (
    APIClientError,
    AuthorizationError,
    ConfigurationError,
    ProjectNotFoundError,
    ValidationError,
)
from bidsmart.core.signing import verify_callback
from bidsmart.schemas.project import AnalysisRequest
from bidsmart.services import analysis_service
from bidsmart.services.analysis_service import AnalysisService, extract_workflow_run_id

REAL_ASYNC_CLIENT = httpx.AsyncClient
SECRET = "analysis-secret"
NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def owner_id():
    return uuid4()


@pytest.fixture
def project(owner_id):
    return SimpleNamespace(id=uuid4(), user_id=owner_id)


@pytest.fixture
def uploads(project):
    return [
        SimpleNamespace(id=uuid4(), project_id=project.id, file_path=f"{project.id}/bid-{n}.pdf")
        for n in range(2)
    ]


@pytest.fixture
def service(project, uploads):
    storage = MagicMock()
    storage.create_signed_url = AsyncMock(side_effect=lambda path: f"https://signed.example/{path}")

    service = AnalysisService(MagicMock(), storage_service=storage, callback_secret=SECRET)
    service.project_repo = AsyncMock()
    service.project_repo.get_by_id.return_value = project
    service.upload_repo = AsyncMock()
    by_id = {upload.id: upload for upload in uploads}
    service.upload_repo.get_by_id.side_effect = lambda upload_id: by_id.get(upload_id)
    return service


@pytest.fixture
def mindpal(monkeypatch):
    """Install a MindPal handler; returns the captured requests."""
    requests = []

    def install(handler):
        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(record)
        monkeypatch.setattr(
            analysis_service.httpx, "AsyncClient", lambda *a, **kw: REAL_ASYNC_CLIENT(transport=transport)
        )
        return requests

    return install


def _request(uploads, **priorities):
    return AnalysisRequest(
        pdf_upload_ids=[upload.id for upload in uploads],
        user_priorities={"price": 5, "project_details": "Two story house", **priorities},
    )


class TestWorkflowRunId:

    def test_known_keys(self):
        assert extract_workflow_run_id({"workflowRunId": "a"}) == "a"
        assert extract_workflow_run_id({"workflow_run_id": "b"}) == "b"
        assert extract_workflow_run_id({"data": {"workflow_run_id": "c"}}) == "c"
        assert extract_workflow_run_id({"id": "d"}) == "d"
        assert extract_workflow_run_id({}) is None


class TestAnalysisService:

    async def test_starts_one_run_per_upload(self, service, project, owner_id, uploads, mindpal):
        requests = mindpal(lambda request: httpx.Response(200, json={"workflow_run_id": "run-1"}))

        result = await service.execute(project.id, owner_id, _request(uploads), now=NOW)

        assert result["success"] is True
        assert result["pdfCount"] == 2
        assert result["workflowRunId"] == "run-1"
        assert result["requestId"] == str(uploads[0].id)
        assert result["message"] == "Analysis started successfully"
        assert len(requests) == 2

        first = requests[0]
        assert first.url.params["workflow_id"] == "wf-test"
        assert first.headers["x-api-key"] == "test-mindpal-key"
        data = json.loads(first.content)["data"]
        assert json.loads(data["document_urls"]) == [f"https://signed.example/{uploads[0].file_path}"]
        assert json.loads(data["user_priorities"])["price"] == 5
        assert data["user_notes"] == "Two story house"
        assert data["project_id"] == str(project.id)
        assert data["request_id"] == str(uploads[0].id)
        assert data["timestamp"] == NOW.isoformat()
        # The callback for this run must verify with the same secret
        verify_callback(data["request_id"], data["timestamp"], data["signature"], SECRET, now=NOW)

        project_update = service.project_repo.update.await_args.kwargs
        assert project_update["status"] == "analyzing"
        assert project_update["mindpal_run_id"] == "run-1"
        upload_update = service.upload_repo.update.await_args_list[0].kwargs
        assert upload_update["status"] == "processing"
        assert upload_update["mindpal_status"] == "triggered"

    async def test_partial_failure_marks_only_that_upload(self, service, project, owner_id, uploads, mindpal):
        responses = iter([httpx.Response(500, text="overloaded"), httpx.Response(200, json={"id": "run-2"})])
        mindpal(lambda request: next(responses))

        result = await service.execute(project.id, owner_id, _request(uploads), now=NOW)

        assert result["pdfCount"] == 1
        assert result["workflowRunId"] == "run-2"
        failed_update = service.upload_repo.update.await_args_list[0]
        assert failed_update.args[0] == uploads[0].id
        assert failed_update.kwargs == {"status": "failed", "error_message": "MindPal API error: 500"}
        assert result["runs"][0]["success"] is False

    async def test_all_runs_rejected(self, service, project, owner_id, uploads, mindpal):
        mindpal(lambda request: httpx.Response(401, json={"error": "bad key"}))

        with pytest.raises(APIClientError) as exc_info:
            await service.execute(project.id, owner_id, _request(uploads), now=NOW)

        assert exc_info.value.message == "MindPal API failed: MindPal API error: 401"
        service.project_repo.update.assert_not_awaited()

    async def test_foreign_project(self, service, project, uploads):
        with pytest.raises(AuthorizationError):
            await service.execute(project.id, uuid4(), _request(uploads))

    async def test_missing_project(self, service, owner_id, uploads):
        service.project_repo.get_by_id.return_value = None

        with pytest.raises(ProjectNotFoundError):
            await service.execute(uuid4(), owner_id, _request(uploads))

    async def test_upload_from_other_project(self, service, project, owner_id, uploads):
        uploads[1].project_id = uuid4()

        with pytest.raises(ValidationError) as exc_info:
            await service.execute(project.id, owner_id, _request(uploads))

        assert "belongs to project" in exc_info.value.message

    async def test_unknown_upload(self, service, project, owner_id):
        request = AnalysisRequest(pdf_upload_ids=[uuid4()])

        with pytest.raises(ValidationError):
            await service.execute(project.id, owner_id, request)

    async def test_signed_url_failure(self, service, project, owner_id, uploads):
        service.storage_service.create_signed_url.side_effect = APIClientError("Signed URL generation failed")

        with pytest.raises(ValidationError) as exc_info:
            await service.execute(project.id, owner_id, _request(uploads))

        assert exc_info.value.message.startswith("URL generation failed")

    async def test_requires_configuration(self, project, owner_id, uploads):
        service = AnalysisService(MagicMock(), storage_service=MagicMock(), callback_secret="")

        with pytest.raises(ConfigurationError) as exc_info:
            await service.execute(project.id, owner_id, _request(uploads))

        assert exc_info.value.message == "Server configuration error"
