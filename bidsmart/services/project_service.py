"""Project service for business logic operations.

Owns the CRUD surface behind the dashboard: projects, their uploads, the
extracted bids with their child rows, and the homeowner's requirements.
Every operation is scoped to the calling user; public demo projects are
readable by everybody but writable by nobody except their owner.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.exceptions import AuthorizationError, BidNotFoundError, ProjectNotFoundError
from bidsmart.database.models import BidScore, ContractorBid, Project
from bidsmart.repositories.bid_repository import (
    BidEquipmentRepository,
    BidFaqRepository,
    BidLineItemRepository,
    BidQuestionRepository,
    BidScoreRepository,
    ContractorBidRepository,
)
from bidsmart.repositories.pdf_upload_repository import PdfUploadRepository
from bidsmart.repositories.project_repository import ProjectRepository
from bidsmart.repositories.requirements_repository import ProjectRequirementsRepository
from bidsmart.schemas.project import (
    BidUpdate,
    DataSharingConsentUpdate,
    NotificationSettingsUpdate,
    PdfUploadCreate,
    ProjectCreate,
    ProjectStats,
    ProjectUpdate,
    RequirementsUpdate,
)
from bidsmart.utils.logging import get_logger
from bidsmart.utils.serialization import row_to_dict, rows_to_dicts

LOGGER = get_logger(__name__)


def _score_value(score: Optional[BidScore], field: str) -> float:
    if score is None:
        return 0.0
    value = getattr(score, field)
    return float(value) if value is not None else 0.0


def compute_project_stats(
    bids: Sequence[ContractorBid],
    scores: Dict[UUID, BidScore],
) -> ProjectStats:
    """Price statistics and best value / quality picks for a set of bids.

    Only positive bid amounts count toward the price figures. The best value
    and best quality picks start from the first bid and are replaced only by
    a strictly higher score, so the earliest bid wins ties.
    """
    prices = [float(bid.total_bid_amount) for bid in bids if bid.total_bid_amount and bid.total_bid_amount > 0]

    best_value: Optional[ContractorBid] = None
    best_quality: Optional[ContractorBid] = None
    for bid in bids:
        score = scores.get(bid.id)
        if best_value is None or _score_value(score, "value_score") > _score_value(scores.get(best_value.id), "value_score"):
            best_value = bid
        if best_quality is None or _score_value(score, "quality_score") > _score_value(scores.get(best_quality.id), "quality_score"):
            best_quality = bid

    return ProjectStats(
        total_bids=len(bids),
        average_price=sum(prices) / len(prices) if prices else 0,
        lowest_price=min(prices) if prices else 0,
        highest_price=max(prices) if prices else 0,
        best_value_bid_id=best_value.id if best_value else None,
        best_quality_bid_id=best_quality.id if best_quality else None,
    )


class ProjectService:
    """Service for project, upload, bid and requirements operations."""

    def __init__(self, db_session: AsyncSession):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.project_repo = ProjectRepository(db_session)
        self.upload_repo = PdfUploadRepository(db_session)
        self.bid_repo = ContractorBidRepository(db_session)
        self.line_item_repo = BidLineItemRepository(db_session)
        self.equipment_repo = BidEquipmentRepository(db_session)
        self.faq_repo = BidFaqRepository(db_session)
        self.question_repo = BidQuestionRepository(db_session)
        self.score_repo = BidScoreRepository(db_session)
        self.requirements_repo = ProjectRequirementsRepository(db_session)

    # ------------------------------------------------------------------
    # Access helpers
    # ------------------------------------------------------------------

    async def _get_visible_project(self, project_id: UUID, user_id: UUID) -> Project:
        project = await self.project_repo.get_by_id(project_id)
        if project is None or (project.user_id != user_id and not project.is_public_demo):
            raise ProjectNotFoundError(f"Project {project_id} not found")
        return project

    async def _get_owned_project(self, project_id: UUID, user_id: UUID) -> Project:
        project = await self._get_visible_project(project_id, user_id)
        if project.user_id != user_id:
            LOGGER.warning(f"User {user_id} attempted to modify project {project_id}")
            raise AuthorizationError("Demo projects are read-only")
        return project

    async def _get_visible_bid(self, bid_id: UUID, user_id: UUID) -> ContractorBid:
        bid = await self.bid_repo.get_by_id(bid_id)
        if bid is None:
            raise BidNotFoundError(f"Bid {bid_id} not found")
        try:
            await self._get_visible_project(bid.project_id, user_id)
        except ProjectNotFoundError as e:
            raise BidNotFoundError(f"Bid {bid_id} not found") from e
        return bid

    async def _get_owned_bid(self, bid_id: UUID, user_id: UUID) -> ContractorBid:
        bid = await self._get_visible_bid(bid_id, user_id)
        await self._get_owned_project(bid.project_id, user_id)
        return bid

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def list_projects(self, user_id: UUID, include_public_demos: bool = True) -> List[Dict[str, Any]]:
        projects = await self.project_repo.list_for_user(user_id, include_public_demos=include_public_demos)
        return rows_to_dicts(projects)

    async def get_project(self, project_id: UUID, user_id: UUID) -> Dict[str, Any]:
        return row_to_dict(await self._get_visible_project(project_id, user_id))

    async def create_project(self, user_id: UUID, data: ProjectCreate) -> Dict[str, Any]:
        project = await self.project_repo.create(user_id=user_id, **data.model_dump())
        LOGGER.info(f"Created project {project.id} for user {user_id}")
        return row_to_dict(project)

    async def update_project(self, project_id: UUID, user_id: UUID, data: ProjectUpdate) -> Dict[str, Any]:
        await self._get_owned_project(project_id, user_id)
        values = data.model_dump(exclude_unset=True)
        if "selected_bid_id" in values and values["selected_bid_id"] is not None:
            values["decision_date"] = datetime.now(timezone.utc)
        project = await self.project_repo.update(project_id, **values)
        return row_to_dict(project)

    async def update_status(self, project_id: UUID, user_id: UUID, status: str) -> Dict[str, Any]:
        await self._get_owned_project(project_id, user_id)
        project = await self.project_repo.update_status(project_id, status)
        LOGGER.info(f"Project {project_id} status set to {status}")
        return row_to_dict(project)

    async def update_notification_settings(
        self, project_id: UUID, user_id: UUID, data: NotificationSettingsUpdate
    ) -> Dict[str, Any]:
        await self._get_owned_project(project_id, user_id)
        project = await self.project_repo.update(
            project_id,
            notification_email=str(data.notification_email) if data.notification_email else None,
            notify_on_completion=data.notify_on_completion,
        )
        return row_to_dict(project)

    async def update_data_sharing_consent(
        self, project_id: UUID, user_id: UUID, data: DataSharingConsentUpdate
    ) -> Dict[str, Any]:
        await self._get_owned_project(project_id, user_id)
        project = await self.project_repo.update(
            project_id,
            data_sharing_consent=data.consent,
            data_sharing_consented_at=datetime.now(timezone.utc) if data.consent else None,
        )
        return row_to_dict(project)

    async def increment_rerun_count(self, project_id: UUID, user_id: UUID) -> int:
        project = await self._get_owned_project(project_id, user_id)
        rerun_count = (project.rerun_count or 0) + 1
        await self.project_repo.update(project_id, rerun_count=rerun_count)
        return rerun_count

    async def delete_project(self, project_id: UUID, user_id: UUID) -> None:
        await self._get_owned_project(project_id, user_id)
        await self.project_repo.delete(project_id)
        LOGGER.info(f"Deleted project {project_id}")

    async def get_project_summary(self, project_id: UUID, user_id: UUID) -> Dict[str, Any]:
        """Project with its bids, their children, requirements and stats.

        Returns:
            Dictionary with ``project``, ``bids``, ``requirements`` and ``stats``
        """
        project = await self._get_visible_project(project_id, user_id)
        bids = await self.bid_repo.list_by_project(project_id)
        bid_ids = [bid.id for bid in bids]

        line_items = await self.line_item_repo.list_by_bids(bid_ids)
        equipment = await self.equipment_repo.list_by_bids(bid_ids)
        faqs = await self.faq_repo.list_by_bids(bid_ids)
        scores = {score.bid_id: score for score in await self.score_repo.list_by_bids(bid_ids)}
        requirements = await self.requirements_repo.get_by_project(project_id)

        bid_entries = []
        for bid in bids:
            bid_entries.append({
                "bid": row_to_dict(bid),
                "line_items": rows_to_dicts(item for item in line_items if item.bid_id == bid.id),
                "equipment": rows_to_dicts(item for item in equipment if item.bid_id == bid.id),
                "faqs": rows_to_dicts(item for item in faqs if item.bid_id == bid.id),
                "score": row_to_dict(scores.get(bid.id)),
            })

        stats = compute_project_stats(bids, scores)
        return {
            "project": row_to_dict(project),
            "bids": bid_entries,
            "requirements": row_to_dict(requirements),
            "stats": stats.model_dump(by_alias=True),
        }

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    async def list_uploads(self, project_id: UUID, user_id: UUID) -> List[Dict[str, Any]]:
        await self._get_visible_project(project_id, user_id)
        return rows_to_dicts(await self.upload_repo.list_by_project(project_id))

    async def create_upload(self, project_id: UUID, user_id: UUID, data: PdfUploadCreate) -> Dict[str, Any]:
        await self._get_owned_project(project_id, user_id)
        upload = await self.upload_repo.create(project_id=project_id, status="uploaded", **data.model_dump())
        LOGGER.info(f"Registered upload {upload.id} for project {project_id}")
        return row_to_dict(upload)

    # ------------------------------------------------------------------
    # Bids
    # ------------------------------------------------------------------

    async def list_bids(self, project_id: UUID, user_id: UUID) -> List[Dict[str, Any]]:
        await self._get_visible_project(project_id, user_id)
        return rows_to_dicts(await self.bid_repo.list_by_project(project_id))

    async def get_bid(self, bid_id: UUID, user_id: UUID) -> Dict[str, Any]:
        return row_to_dict(await self._get_visible_bid(bid_id, user_id))

    async def update_bid(self, bid_id: UUID, user_id: UUID, data: BidUpdate) -> Dict[str, Any]:
        await self._get_owned_bid(bid_id, user_id)
        bid = await self.bid_repo.update(bid_id, **data.model_dump(exclude_unset=True))
        return row_to_dict(bid)

    async def toggle_bid_favorite(self, bid_id: UUID, user_id: UUID) -> Dict[str, Any]:
        bid = await self._get_owned_bid(bid_id, user_id)
        updated = await self.bid_repo.update(bid_id, is_favorite=not bid.is_favorite)
        return row_to_dict(updated)

    async def verify_bid(self, bid_id: UUID, user_id: UUID) -> Dict[str, Any]:
        await self._get_owned_bid(bid_id, user_id)
        bid = await self.bid_repo.update(
            bid_id,
            verified_by_user=True,
            verified_at=datetime.now(timezone.utc),
        )
        return row_to_dict(bid)

    async def delete_bid(self, bid_id: UUID, user_id: UUID) -> None:
        await self._get_owned_bid(bid_id, user_id)
        await self.bid_repo.delete(bid_id)
        LOGGER.info(f"Deleted bid {bid_id}")

    async def list_line_items(self, bid_id: UUID, user_id: UUID) -> List[Dict[str, Any]]:
        await self._get_visible_bid(bid_id, user_id)
        return rows_to_dicts(await self.line_item_repo.list_by_bid(bid_id))

    async def list_equipment(self, bid_id: UUID, user_id: UUID) -> List[Dict[str, Any]]:
        await self._get_visible_bid(bid_id, user_id)
        return rows_to_dicts(await self.equipment_repo.list_by_bid(bid_id))

    async def list_faqs(self, bid_id: UUID, user_id: UUID) -> List[Dict[str, Any]]:
        await self._get_visible_bid(bid_id, user_id)
        return rows_to_dicts(await self.faq_repo.list_by_bid(bid_id))

    async def list_questions(self, bid_id: UUID, user_id: UUID) -> List[Dict[str, Any]]:
        await self._get_visible_bid(bid_id, user_id)
        return rows_to_dicts(await self.question_repo.list_by_bid(bid_id))

    async def get_score(self, bid_id: UUID, user_id: UUID) -> Optional[Dict[str, Any]]:
        await self._get_visible_bid(bid_id, user_id)
        scores = await self.score_repo.list_by_bid(bid_id)
        return row_to_dict(scores[-1]) if scores else None

    async def list_project_questions(self, project_id: UUID, user_id: UUID) -> List[Dict[str, Any]]:
        """Questions for every bid in the project."""
        await self._get_visible_project(project_id, user_id)
        bids = await self.bid_repo.list_by_project(project_id)
        return rows_to_dicts(await self.question_repo.list_by_bids([bid.id for bid in bids]))

    # ------------------------------------------------------------------
    # Requirements
    # ------------------------------------------------------------------

    async def get_requirements(self, project_id: UUID, user_id: UUID) -> Optional[Dict[str, Any]]:
        await self._get_visible_project(project_id, user_id)
        return row_to_dict(await self.requirements_repo.get_by_project(project_id))

    async def save_requirements(
        self, project_id: UUID, user_id: UUID, data: RequirementsUpdate
    ) -> Dict[str, Any]:
        await self._get_owned_project(project_id, user_id)
        values = data.model_dump()
        values["completed_at"] = datetime.now(timezone.utc)
        requirements = await self.requirements_repo.upsert(project_id, values)
        return row_to_dict(requirements)
