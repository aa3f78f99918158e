"""Tests for the four-phase flow reducers and controller."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from bidsmart.client.phase import (
    PHASE_STORAGE_KEY,
    Phase,
    PhaseController,
    PhaseState,
    complete_phase,
    derive_phase_state,
    go_to_phase,
    select_project,
)
from bidsmart.client.storage import LocalStorage
from bidsmart.core.exceptions import ProjectNotFoundError


class TestReducers:

    def test_initial_state(self):
        state = PhaseState()

        assert state.current_phase == Phase.GATHER
        assert state.can_access(Phase.GATHER)
        assert not state.can_access(Phase.COMPARE)

    def test_completing_gather_opens_everything(self):
        state = complete_phase(PhaseState(), Phase.GATHER)

        assert state.current_phase == Phase.COMPARE
        assert state.phase_status == {
            Phase.GATHER: "completed",
            Phase.COMPARE: "active",
            Phase.DECIDE: "active",
            Phase.VERIFY: "active",
        }

    def test_completing_compare_opens_next(self):
        state = PhaseState(
            current_phase=Phase.COMPARE,
            phase_status={
                Phase.GATHER: "completed",
                Phase.COMPARE: "active",
                Phase.DECIDE: "locked",
                Phase.VERIFY: "locked",
            },
        )

        state = complete_phase(state, Phase.COMPARE)

        assert state.current_phase == Phase.DECIDE
        assert state.phase_status[Phase.DECIDE] == "active"
        assert state.phase_status[Phase.VERIFY] == "locked"

    def test_completing_verify_stays_on_verify(self):
        state = complete_phase(complete_phase(PhaseState(), Phase.GATHER), Phase.VERIFY)

        assert state.current_phase == Phase.VERIFY
        assert state.phase_status[Phase.VERIFY] == "completed"

    def test_locked_phase_is_not_reachable(self):
        state = PhaseState()

        assert go_to_phase(state, Phase.DECIDE) is state

    def test_go_back_to_completed_phase(self):
        state = complete_phase(PhaseState(), Phase.GATHER)

        assert go_to_phase(state, Phase.GATHER).current_phase == Phase.GATHER

    def test_storage_round_trip_keeps_project(self):
        state = complete_phase(PhaseState(project_id="p-1"), Phase.GATHER)

        stored = state.to_storage()
        assert stored["phaseStatus"]["1"] == "completed"
        assert PhaseState.from_storage(stored) == state

    @pytest.mark.parametrize(
        "data",
        [
            None,
            "garbage",
            {"currentPhase": 9, "phaseStatus": {}},
            {"currentPhase": 1, "phaseStatus": {"1": "active"}},
            {"currentPhase": 1, "phaseStatus": {"1": "open", "2": "locked", "3": "locked", "4": "locked"}},
        ],
    )
    def test_malformed_storage(self, data):
        assert PhaseState.from_storage(data) is None


class TestDerivePhaseState:

    def test_ready_project_unlocks_all(self):
        state = derive_phase_state("p-1", 2, "2026-10-01T00:00:00Z")

        assert state.current_phase == Phase.GATHER
        assert state.phase_status[Phase.GATHER] == "completed"
        assert state.can_access(Phase.VERIFY)

    @pytest.mark.parametrize("bids,completed_at", [(1, "2026-10-01"), (3, None)])
    def test_not_ready(self, bids, completed_at):
        state = derive_phase_state("p-1", bids, completed_at)

        assert state == PhaseState(project_id="p-1")


class TestSelectProject:
    projects = [{"id": "a"}, {"id": "b"}]

    def test_explicit_id(self):
        assert select_project(self.projects, "b", "a") == {"id": "b"}

    def test_unknown_explicit_id(self):
        with pytest.raises(ProjectNotFoundError):
            select_project(self.projects, "zzz", None)

    def test_new_project(self):
        assert select_project(self.projects, "new", "a") is None

    def test_cached_then_most_recent(self):
        assert select_project(self.projects, None, "b") == {"id": "b"}
        assert select_project(self.projects, None, "gone") == {"id": "a"}
        assert select_project([], None, None) is None


def _api(projects, bids=(), requirements=None):
    api = MagicMock()
    api.list_projects = AsyncMock(return_value=list(projects))
    api.list_bids = AsyncMock(return_value=list(bids))
    api.get_requirements = AsyncMock(return_value=requirements)
    api.list_project_questions = AsyncMock(return_value=[])
    api.create_project = AsyncMock(return_value={"id": "created-1", "status": "collecting_bids"})
    return api


class TestPhaseController:

    async def test_load_derives_and_persists(self, tmp_path):
        storage = LocalStorage(tmp_path / "state.json")
        api = _api([{"id": "p-1"}], bids=[{"id": "b1"}, {"id": "b2"}], requirements={"completed_at": "2026-10-01"})
        controller = PhaseController(api, storage)

        state = await controller.load()

        assert state.project_id == "p-1"
        assert state.phase_status[Phase.COMPARE] == "active"
        assert storage.get_json(PHASE_STORAGE_KEY)["projectId"] == "p-1"

    async def test_cached_state_is_restored_for_same_project(self, tmp_path):
        storage = LocalStorage(tmp_path / "state.json")
        cached = complete_phase(PhaseState(project_id="p-1"), Phase.GATHER)
        cached = complete_phase(cached, Phase.COMPARE)
        storage.set_json(PHASE_STORAGE_KEY, cached.to_storage())
        controller = PhaseController(_api([{"id": "p-1"}]), storage)

        state = await controller.load()

        assert state == cached

    async def test_cache_for_other_project_is_ignored(self, tmp_path):
        storage = LocalStorage(tmp_path / "state.json")
        storage.set_json(PHASE_STORAGE_KEY, complete_phase(PhaseState(project_id="old"), Phase.GATHER).to_storage())
        controller = PhaseController(_api([{"id": "p-2"}]), storage)

        state = await controller.load()

        assert state == PhaseState(project_id="p-2")

    async def test_unknown_project_sets_error(self, tmp_path):
        controller = PhaseController(_api([{"id": "p-1"}]), LocalStorage(tmp_path / "state.json"))

        with pytest.raises(ProjectNotFoundError):
            await controller.load("missing")

        assert controller.error == "Failed to load project data"

    async def test_ensure_project_exists_creates_once(self, tmp_path):
        api = _api([])
        controller = PhaseController(api, LocalStorage(tmp_path / "state.json"))
        await controller.load()

        first = await controller.ensure_project_exists()
        second = await controller.ensure_project_exists()

        assert first == second == "created-1"
        api.create_project.assert_awaited_once_with("My Heat Pump Project", status="collecting_bids")

    async def test_navigation_is_persisted(self, tmp_path):
        storage = LocalStorage(tmp_path / "state.json")
        controller = PhaseController(_api([{"id": "p-1"}]), storage)
        await controller.load()

        controller.go_to_phase(Phase.DECIDE)
        assert controller.state.current_phase == Phase.GATHER

        controller.complete_phase(Phase.GATHER)
        controller.go_to_phase(Phase.VERIFY)

        assert storage.get_json(PHASE_STORAGE_KEY)["currentPhase"] == 4
