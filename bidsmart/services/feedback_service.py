"""Feedback panel submissions and contractor installation reviews."""

from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.exceptions import AuthorizationError, BidNotFoundError, ProjectNotFoundError
from bidsmart.repositories.bid_repository import ContractorBidRepository
from bidsmart.repositories.feedback_repository import ContractorReviewRepository, UserFeedbackRepository
from bidsmart.repositories.project_repository import ProjectRepository
from bidsmart.schemas.feedback import ContractorReviewCreate, FeedbackCreate
from bidsmart.utils.logging import get_logger
from bidsmart.utils.serialization import row_to_dict

LOGGER = get_logger(__name__)


class FeedbackService:
    """Stores product feedback and the homeowner's review of the hired contractor."""

    def __init__(self, db_session: AsyncSession):
        self.feedback_repo = UserFeedbackRepository(db_session)
        self.review_repo = ContractorReviewRepository(db_session)
        self.project_repo = ProjectRepository(db_session)
        self.bid_repo = ContractorBidRepository(db_session)

    async def submit_feedback(self, data: FeedbackCreate) -> Dict[str, Any]:
        """Insert one feedback row; a missing client timestamp becomes now."""
        feedback = await self.feedback_repo.create(
            type=data.type,
            message=data.message,
            url=data.url or None,
            user_agent=data.user_agent or None,
            timestamp=data.timestamp or datetime.now(timezone.utc),
        )
        LOGGER.info(f"Stored {data.type} feedback {feedback.id}")
        return {"id": str(feedback.id)}

    async def submit_contractor_review(self, user_id: UUID, data: ContractorReviewCreate) -> Dict[str, Any]:
        """Create the project's review, or replace the one already submitted.

        Returns:
            ``{review, updated}`` where ``updated`` tells whether a review existed

        Raises:
            ProjectNotFoundError: If the project does not exist
            AuthorizationError: If the caller does not own the project
            BidNotFoundError: If the bid is not one of the project's bids
        """
        project = await self.project_repo.get_by_id(data.project_id)
        if project is None:
            raise ProjectNotFoundError("Project not found")
        if project.user_id != user_id:
            LOGGER.warning(f"User {user_id} attempted to review project {data.project_id}")
            raise AuthorizationError("Not authorized to review this project")

        bid = await self.bid_repo.get_by_id(data.contractor_bid_id)
        if bid is None or bid.project_id != data.project_id:
            raise BidNotFoundError(f"Bid {data.contractor_bid_id} not found")

        values = data.model_dump(exclude={"project_id", "contractor_bid_id"})
        values["bid_id"] = data.contractor_bid_id

        existing = await self.review_repo.get_by_project(data.project_id)
        if existing is None:
            review = await self.review_repo.create(project_id=data.project_id, user_id=user_id, **values)
        else:
            review = await self.review_repo.update(existing.id, **values)

        LOGGER.info(f"{'Updated' if existing else 'Stored'} contractor review for project {data.project_id}")
        return {"review": row_to_dict(review), "updated": existing is not None}
