"""Results-screen state for a single project.

``ProjectController`` loads a project with its bids, requirements and
contractor questions, then runs two background timers: a question poll that
waits for the question generator to finish, and a one-shot bid refresh that
picks up enrichment data (scores) arriving after the first load. Both timers
are cancelled by ``close()``.
"""

import asyncio
from typing import Any, Dict, List, Optional

from bidsmart.client.analysis import AnalysisStatus, bid_has_scope, derive_analysis_status
from bidsmart.client.api import BidSmartClient
from bidsmart.client.storage import LocalStorage
from bidsmart.core.exceptions import APIClientError, ProjectNotFoundError
from bidsmart.schemas.project import DEFAULT_PROJECT_NAME
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

TAB_STORAGE_KEY = "bidsmart_active_tab"
DEFAULT_TAB = "incentives"

QUESTION_POLL_INTERVAL = 5.0
QUESTION_POLL_MAX_ATTEMPTS = 60
BID_REFRESH_DELAY = 15.0

SETTLED_PROJECT_STATUSES = ("comparing", "completed")


class ProjectController:
    """Loads and refreshes the data behind the results screen."""

    def __init__(
        self,
        api: BidSmartClient,
        project_id: Optional[str],
        storage: Optional[LocalStorage] = None,
        poll_interval: float = QUESTION_POLL_INTERVAL,
        max_poll_attempts: int = QUESTION_POLL_MAX_ATTEMPTS,
        refresh_delay: float = BID_REFRESH_DELAY,
    ):
        self.api = api
        self.project_id = str(project_id) if project_id else None
        self.storage = storage or LocalStorage()
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.refresh_delay = refresh_delay

        self.project: Optional[Dict[str, Any]] = None
        self.bids: List[Dict[str, Any]] = []
        self.requirements: Optional[Dict[str, Any]] = None
        self.questions: List[Dict[str, Any]] = []
        self.questions_loading = False
        self.analysis_status: AnalysisStatus = "processing"
        self.error: Optional[str] = None
        self.poll_attempts = 0

        self._poll_task: Optional[asyncio.Task] = None
        self._refresh_task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "ProjectController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def is_demo_mode(self) -> bool:
        return bool(self.project and self.project.get("is_public_demo"))

    @property
    def analyzed_bid_count(self) -> int:
        return sum(1 for entry in self.bids if bid_has_scope(entry["bid"]))

    @property
    def total_bid_count(self) -> int:
        return len(self.bids)

    @property
    def active_tab(self) -> str:
        return self.storage.get_item(TAB_STORAGE_KEY) or DEFAULT_TAB

    @active_tab.setter
    def active_tab(self, tab: str) -> None:
        self.storage.set_item(TAB_STORAGE_KEY, tab)

    def _update_analysis_status(self) -> None:
        self.analysis_status = derive_analysis_status(
            self.project, [entry["bid"] for entry in self.bids]
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _find_project(self) -> Dict[str, Any]:
        projects = await self.api.list_projects()
        project = next((p for p in projects if str(p["id"]) == self.project_id), None)

        if project is not None:
            # The list can carry a stale status while analysis is running.
            if project.get("status") not in SETTLED_PROJECT_STATUSES:
                fresh = await self.api.get_project(self.project_id)
                if fresh:
                    project = fresh
            return project

        project = await self.api.get_project(self.project_id)
        if project is None:
            raise ProjectNotFoundError("Project not found")
        return project

    async def _load_bid(self, bid: Dict[str, Any]) -> Dict[str, Any]:
        equipment = await self.api.list_equipment(bid["id"])
        try:
            score = await self.api.get_score(bid["id"])
        except APIClientError:
            score = None
        return {"bid": bid, "equipment": equipment, "score": score}

    async def _load_bids(self) -> List[Dict[str, Any]]:
        bids = await self.api.list_bids(self.project_id)
        return list(await asyncio.gather(*(self._load_bid(bid) for bid in bids)))

    async def load(self) -> None:
        """Fetch everything for the project and start the background timers.

        Raises:
            ProjectNotFoundError: If the project is neither listed nor fetchable
        """
        # Cancel timers left by an earlier load
        await self.close()

        try:
            self.project = await self._find_project()
            self.bids = await self._load_bids()
            self.requirements = await self.api.get_requirements(self.project_id)
            self.questions = await self.api.list_project_questions(self.project_id)
        except (APIClientError, ProjectNotFoundError) as e:
            LOGGER.error(f"Failed to initialize project {self.project_id}: {str(e)}")
            self.error = "Failed to load project data"
            raise

        self.error = None
        self._update_analysis_status()
        self._start_question_polling()
        self._schedule_bid_refresh()

    async def refresh_bids(self) -> None:
        if not self.project_id:
            return
        self.bids = await self._load_bids()
        self._update_analysis_status()

    async def refresh_requirements(self) -> None:
        if not self.project_id:
            return
        self.requirements = await self.api.get_requirements(self.project_id)

    async def refresh_questions(self) -> None:
        if not self.project_id or not self.bids:
            return
        self.questions = await self.api.list_project_questions(self.project_id)

    async def ensure_project_exists(self) -> str:
        if self.project_id:
            return self.project_id

        project = await self.api.create_project(DEFAULT_PROJECT_NAME, status="collecting_bids")
        self.project = project
        self.project_id = str(project["id"])
        return self.project_id

    # ------------------------------------------------------------------
    # Background timers
    # ------------------------------------------------------------------

    def _start_question_polling(self) -> None:
        if not self.project_id or not self.bids:
            return
        if self.questions or self.analysis_status == "failed":
            return

        self.questions_loading = True
        self.poll_attempts = 0
        self._poll_task = asyncio.create_task(self._poll_questions())

    async def _poll_questions(self) -> None:
        while self.poll_attempts < self.max_poll_attempts:
            await asyncio.sleep(self.poll_interval)
            self.poll_attempts += 1

            try:
                questions = await self.api.list_project_questions(self.project_id)
            except APIClientError as e:
                LOGGER.debug(f"Question poll {self.poll_attempts} failed: {str(e)}")
                continue

            if questions:
                self.questions = questions
                break

        self.questions_loading = False

    def _schedule_bid_refresh(self) -> None:
        if not self.project_id or self.analysis_status == "failed":
            return
        self._refresh_task = asyncio.create_task(self._delayed_bid_refresh())

    async def _delayed_bid_refresh(self) -> None:
        await asyncio.sleep(self.refresh_delay)
        try:
            await self.refresh_bids()
        except APIClientError as e:
            LOGGER.warning(f"Delayed bid refresh failed: {str(e)}")

    async def close(self) -> None:
        """Cancel the question poll and the pending bid refresh."""
        for task in (self._poll_task, self._refresh_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._poll_task = None
        self._refresh_task = None
        self.questions_loading = False
