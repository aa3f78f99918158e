"""Tests for client-side storage, analysis status and the results controller."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from bidsmart.client.analysis import derive_analysis_status
from bidsmart.client.project import DEFAULT_TAB, ProjectController
from bidsmart.client.storage import LocalStorage
from bidsmart.core.exceptions import APIClientError, ProjectNotFoundError

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class TestLocalStorage:

    def test_set_get_remove(self, tmp_path):
        storage = LocalStorage(tmp_path / "nested" / "store.json")

        storage.set_item("tab", "compare")
        assert storage.get_item("tab") == "compare"

        storage.remove_item("tab")
        assert storage.get_item("tab") is None

    def test_values_survive_new_instance(self, tmp_path):
        LocalStorage(tmp_path / "store.json").set_json("state", {"currentPhase": 2})

        assert LocalStorage(tmp_path / "store.json").get_json("state") == {"currentPhase": 2}

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        storage = LocalStorage(path)

        assert storage.get_item("anything") is None
        storage.set_item("key", "value")
        assert storage.get_item("key") == "value"

    def test_malformed_json_value(self, tmp_path):
        storage = LocalStorage(tmp_path / "store.json")
        storage.set_item("state", "{broken")

        assert storage.get_json("state") is None

    def test_path_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BIDSMART_STORAGE_PATH", str(tmp_path / "env.json"))

        assert LocalStorage().path == tmp_path / "env.json"


def _bid(with_scope: bool):
    return {"id": "b", "scope_summary": "Full install" if with_scope else None, "inclusions": []}


class TestAnalysisStatus:

    def test_nothing_loaded(self):
        assert derive_analysis_status(None, []) == "processing"

    @pytest.mark.parametrize("status", ["comparing", "completed"])
    def test_complete(self, status):
        assert derive_analysis_status({"status": status}, [_bid(False)]) == "complete"

    def test_cancelled_is_failed(self):
        assert derive_analysis_status({"status": "cancelled"}, []) == "failed"

    def test_some_bids_analyzed(self):
        assert derive_analysis_status({"status": "analyzing"}, [_bid(True), _bid(False)]) == "partial"

    def test_timeout_after_ten_minutes(self):
        project = {"status": "analyzing", "analysis_queued_at": (NOW - timedelta(minutes=11)).isoformat()}

        assert derive_analysis_status(project, [], now=NOW) == "timeout"

    def test_still_within_window(self):
        project = {"status": "analyzing", "analysis_queued_at": NOW - timedelta(minutes=5)}

        assert derive_analysis_status(project, [_bid(False)], now=NOW) == "processing"


def _api(project, bids=None, questions=None):
    api = MagicMock()
    api.list_projects = AsyncMock(return_value=[project])
    api.get_project = AsyncMock(return_value=project)
    api.list_bids = AsyncMock(return_value=bids if bids is not None else [{"id": "b1", "scope_summary": "Install"}])
    api.list_equipment = AsyncMock(return_value=[{"brand": "Mitsubishi"}])
    api.get_score = AsyncMock(return_value={"overall_score": 80})
    api.get_requirements = AsyncMock(return_value={"priority_price": 4})
    api.list_project_questions = AsyncMock(side_effect=questions or [[]])
    api.create_project = AsyncMock(return_value={"id": "new-project"})
    return api


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "store.json")


class TestProjectController:

    async def test_load_collects_bid_details(self, storage):
        api = _api({"id": "p-1", "status": "comparing"}, questions=[[{"question_text": "Q"}]])

        async with ProjectController(api, "p-1", storage, refresh_delay=60) as controller:
            await controller.load()

            assert controller.error is None
            assert controller.analysis_status == "complete"
            assert controller.total_bid_count == 1
            assert controller.analyzed_bid_count == 1
            assert controller.bids[0]["equipment"] == [{"brand": "Mitsubishi"}]
            assert controller.bids[0]["score"] == {"overall_score": 80}
            assert controller.questions_loading is False
            api.get_project.assert_not_awaited()

    async def test_unsettled_project_is_refetched(self, storage):
        api = _api({"id": "p-1", "status": "analyzing"})
        api.get_project.return_value = {"id": "p-1", "status": "comparing"}

        async with ProjectController(api, "p-1", storage, poll_interval=60, refresh_delay=60) as controller:
            await controller.load()

            assert controller.project["status"] == "comparing"

    async def test_score_failure_leaves_score_empty(self, storage):
        api = _api({"id": "p-1", "status": "comparing"}, questions=[[{"question_text": "Q"}]])
        api.get_score.side_effect = APIClientError("404: not found")

        async with ProjectController(api, "p-1", storage, refresh_delay=60) as controller:
            await controller.load()

            assert controller.bids[0]["score"] is None

    async def test_missing_project(self, storage):
        api = _api({"id": "other", "status": "comparing"})
        api.get_project.return_value = None

        controller = ProjectController(api, "p-1", storage)
        with pytest.raises(ProjectNotFoundError):
            await controller.load()

        assert controller.error == "Failed to load project data"

    async def test_polls_until_questions_arrive(self, storage):
        api = _api(
            {"id": "p-1", "status": "comparing"},
            questions=[[], [], [{"question_text": "Is a permit included?"}]],
        )

        async with ProjectController(api, "p-1", storage, poll_interval=0.01, refresh_delay=60) as controller:
            await controller.load()
            assert controller.questions_loading is True

            await asyncio.wait_for(controller._poll_task, timeout=1)

            assert controller.questions == [{"question_text": "Is a permit included?"}]
            assert controller.poll_attempts == 2
            assert controller.questions_loading is False

    async def test_polling_gives_up(self, storage):
        api = _api({"id": "p-1", "status": "comparing"}, questions=[[]] * 4)

        async with ProjectController(
            api, "p-1", storage, poll_interval=0.01, max_poll_attempts=3, refresh_delay=60
        ) as controller:
            await controller.load()
            await asyncio.wait_for(controller._poll_task, timeout=1)

            assert controller.poll_attempts == 3
            assert controller.questions == []
            assert controller.questions_loading is False

    async def test_no_polling_without_bids(self, storage):
        api = _api({"id": "p-1", "status": "collecting_bids"}, bids=[])

        async with ProjectController(api, "p-1", storage, refresh_delay=60) as controller:
            await controller.load()

            assert controller._poll_task is None
            assert controller.questions_loading is False

    async def test_delayed_bid_refresh(self, storage):
        api = _api({"id": "p-1", "status": "comparing"}, questions=[[{"question_text": "Q"}]])

        async with ProjectController(api, "p-1", storage, refresh_delay=0.01) as controller:
            await controller.load()
            await asyncio.wait_for(controller._refresh_task, timeout=1)

            assert api.list_bids.await_count == 2

    async def test_close_cancels_timers(self, storage):
        api = _api({"id": "p-1", "status": "comparing"}, questions=[[]] * 10)
        controller = ProjectController(api, "p-1", storage, poll_interval=30, refresh_delay=30)
        await controller.load()
        poll_task, refresh_task = controller._poll_task, controller._refresh_task

        await controller.close()

        assert poll_task.cancelled()
        assert refresh_task.cancelled()
        assert controller.questions_loading is False

    async def test_reload_cancels_earlier_timers(self, storage):
        api = _api({"id": "p-1", "status": "comparing"}, questions=[[]] * 10)

        async with ProjectController(api, "p-1", storage, poll_interval=30, refresh_delay=30) as controller:
            await controller.load()
            first_poll, first_refresh = controller._poll_task, controller._refresh_task

            await controller.load()

            assert first_poll.cancelled()
            assert first_refresh.cancelled()
            assert controller._poll_task is not first_poll
            assert controller._refresh_task is not first_refresh
            assert not controller._poll_task.done()
            assert not controller._refresh_task.done()

    async def test_manual_refreshes(self, storage):
        api = _api(
            {"id": "p-1", "status": "comparing"},
            questions=[[{"question_text": "Q"}], [{"question_text": "Q2"}]],
        )

        async with ProjectController(api, "p-1", storage, refresh_delay=60) as controller:
            await controller.load()
            api.get_requirements.return_value = {"priority_price": 5}

            await controller.refresh_requirements()
            await controller.refresh_questions()

            assert controller.requirements == {"priority_price": 5}
            assert controller.questions == [{"question_text": "Q2"}]

    async def test_refresh_without_project_is_noop(self, storage):
        api = _api({"id": "p-1", "status": "draft"})
        controller = ProjectController(api, None, storage)

        await controller.refresh_requirements()
        await controller.refresh_questions()

        api.get_requirements.assert_not_awaited()
        api.list_project_questions.assert_not_awaited()

    def test_active_tab_is_persisted(self, storage):
        controller = ProjectController(MagicMock(), "p-1", storage)
        assert controller.active_tab == DEFAULT_TAB

        controller.active_tab = "equipment"

        assert ProjectController(MagicMock(), "p-1", storage).active_tab == "equipment"

    async def test_ensure_project_exists(self, storage):
        api = _api({"id": "p-1", "status": "draft"})
        controller = ProjectController(api, None, storage)

        assert await controller.ensure_project_exists() == "new-project"
        assert await controller.ensure_project_exists() == "new-project"
        api.create_project.assert_awaited_once()
