"""Four-phase guided flow state (Gather, Compare, Decide, Verify).

The reducers here are pure; ``PhaseController`` loads the active project
through the API, applies them and persists the result to ``LocalStorage``.
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Dict, List, Literal, Optional

from bidsmart.client.api import BidSmartClient
from bidsmart.client.storage import LocalStorage
from bidsmart.core.exceptions import ProjectNotFoundError
from bidsmart.schemas.project import DEFAULT_PROJECT_NAME
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

PhaseStatus = Literal["locked", "active", "completed"]

PHASE_STORAGE_KEY = "bidsmart_phase_state"
NEW_PROJECT = "new"
MIN_BIDS_FOR_COMPARISON = 2


class Phase(IntEnum):
    GATHER = 1
    COMPARE = 2
    DECIDE = 3
    VERIFY = 4

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class PhaseState:
    current_phase: Phase = Phase.GATHER
    phase_status: Dict[Phase, PhaseStatus] = field(default_factory=lambda: initial_phase_status())
    project_id: Optional[str] = None

    def can_access(self, phase: Phase) -> bool:
        return self.phase_status[phase] != "locked"

    def to_storage(self) -> Dict[str, Any]:
        return {
            "currentPhase": int(self.current_phase),
            "projectId": self.project_id,
            "phaseStatus": {str(int(phase)): status for phase, status in self.phase_status.items()},
        }

    @classmethod
    def from_storage(cls, data: Any) -> Optional["PhaseState"]:
        """Rebuild a stored state, or None if it is malformed."""
        if not isinstance(data, dict):
            return None
        try:
            current = Phase(int(data["currentPhase"]))
            statuses = {Phase(int(key)): value for key, value in data["phaseStatus"].items()}
        except (KeyError, TypeError, ValueError, AttributeError):
            return None
        if set(statuses) != set(Phase) or any(s not in ("locked", "active", "completed") for s in statuses.values()):
            return None
        return cls(current_phase=current, phase_status=statuses, project_id=data.get("projectId"))


def initial_phase_status() -> Dict[Phase, PhaseStatus]:
    return {
        Phase.GATHER: "active",
        Phase.COMPARE: "locked",
        Phase.DECIDE: "locked",
        Phase.VERIFY: "locked",
    }


def complete_phase(state: PhaseState, phase: Phase) -> PhaseState:
    """Mark ``phase`` completed and advance.

    Finishing Gather opens every later phase at once; finishing any other
    phase opens only the next one. The current phase moves forward by one,
    staying on Verify once there.
    """
    statuses = dict(state.phase_status)
    statuses[phase] = "completed"

    if phase == Phase.GATHER:
        for later in (Phase.COMPARE, Phase.DECIDE, Phase.VERIFY):
            statuses[later] = "active"
    elif phase < Phase.VERIFY:
        next_phase = Phase(phase + 1)
        if statuses[next_phase] == "locked":
            statuses[next_phase] = "active"

    current = Phase(phase + 1) if phase < Phase.VERIFY else phase
    return replace(state, current_phase=current, phase_status=statuses)


def go_to_phase(state: PhaseState, phase: Phase) -> PhaseState:
    if not state.can_access(phase):
        return state
    return replace(state, current_phase=phase)


def cached_state_applies(cached: Optional[PhaseState], project_id: Optional[str]) -> bool:
    """A cached position is trusted only for the project it was saved for."""
    return cached is not None and cached.project_id == project_id


def derive_phase_state(
    project_id: Optional[str],
    bid_count: int,
    requirements_completed_at: Any,
) -> PhaseState:
    """Phase state for a project without a usable cache."""
    if bid_count >= MIN_BIDS_FOR_COMPARISON and requirements_completed_at:
        return PhaseState(
            current_phase=Phase.GATHER,
            phase_status={
                Phase.GATHER: "completed",
                Phase.COMPARE: "active",
                Phase.DECIDE: "active",
                Phase.VERIFY: "active",
            },
            project_id=project_id,
        )
    return PhaseState(project_id=project_id)


def select_project(
    projects: List[Dict[str, Any]],
    initial_project_id: Optional[str],
    cached_project_id: Optional[str],
) -> Optional[Dict[str, Any]]:
    """Choose the active project from the user's visible projects.

    Raises:
        ProjectNotFoundError: If an explicit project id is not visible
    """
    by_id = {str(project["id"]): project for project in projects}

    if initial_project_id and initial_project_id != NEW_PROJECT:
        project = by_id.get(str(initial_project_id))
        if project is None:
            raise ProjectNotFoundError("Project not found")
        return project
    if initial_project_id == NEW_PROJECT:
        return None
    if cached_project_id and str(cached_project_id) in by_id:
        return by_id[str(cached_project_id)]
    return projects[0] if projects else None


class PhaseController:
    """Holds the phase flow for one user and keeps it in local storage."""

    def __init__(self, api: BidSmartClient, storage: Optional[LocalStorage] = None):
        self.api = api
        self.storage = storage or LocalStorage()
        self.state = PhaseState()
        self.project: Optional[Dict[str, Any]] = None
        self.bids: List[Dict[str, Any]] = []
        self.requirements: Optional[Dict[str, Any]] = None
        self.questions: List[Dict[str, Any]] = []
        self.error: Optional[str] = None

    @property
    def project_id(self) -> Optional[str]:
        return self.state.project_id

    @property
    def is_demo_mode(self) -> bool:
        return bool(self.project and self.project.get("is_public_demo"))

    def _load_cached(self) -> Optional[PhaseState]:
        return PhaseState.from_storage(self.storage.get_json(PHASE_STORAGE_KEY))

    def _save(self) -> None:
        self.storage.set_json(PHASE_STORAGE_KEY, self.state.to_storage())

    async def load(self, initial_project_id: Optional[str] = None) -> PhaseState:
        """Pick the active project, fetch its data and restore the phase position.

        Raises:
            ProjectNotFoundError: If ``initial_project_id`` is not visible to the user
        """
        cached = self._load_cached()
        projects = await self.api.list_projects()

        try:
            project = select_project(projects, initial_project_id, cached.project_id if cached else None)
        except ProjectNotFoundError:
            self.error = "Failed to load project data"
            raise

        self.project = project
        project_id = str(project["id"]) if project else None
        self.bids, self.requirements, self.questions = [], None, []

        if project_id:
            self.bids = await self.api.list_bids(project_id)
            self.requirements = await self.api.get_requirements(project_id)
            self.questions = await self.api.list_project_questions(project_id)

        if cached_state_applies(cached, project_id):
            self.state = cached
        else:
            self.state = derive_phase_state(
                project_id,
                len(self.bids),
                (self.requirements or {}).get("completed_at"),
            )

        if project_id:
            self._save()
        self.error = None
        return self.state

    def complete_phase(self, phase: Phase) -> PhaseState:
        self.state = complete_phase(self.state, phase)
        self._save()
        return self.state

    def go_to_phase(self, phase: Phase) -> PhaseState:
        if not self.state.can_access(phase):
            return self.state
        self.state = go_to_phase(self.state, phase)
        self._save()
        return self.state

    async def ensure_project_exists(self) -> str:
        """Return the active project id, creating a project when there is none."""
        if self.state.project_id:
            return self.state.project_id

        project = await self.api.create_project(DEFAULT_PROJECT_NAME, status="collecting_bids")
        self.project = project
        self.state = replace(self.state, project_id=str(project["id"]))
        self._save()
        LOGGER.info(f"Created project {project['id']}")
        return self.state.project_id
