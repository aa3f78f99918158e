"""Feedback panel and contractor review endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.auth import get_current_user
from bidsmart.core.database import get_async_session
from bidsmart.schemas.auth import CurrentUser
from bidsmart.schemas.common import ApiResponse
from bidsmart.schemas.feedback import ContractorReviewCreate, FeedbackCreate
from bidsmart.services.feedback_service import FeedbackService
from bidsmart.utils.responses import create_api_response

router = APIRouter()

REVIEW_CREATED = "Thank you for your feedback! Your review helps other homeowners make informed decisions."
REVIEW_UPDATED = "Review updated successfully"


async def get_feedback_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> FeedbackService:
    return FeedbackService(db_session)


FeedbackServiceDep = Annotated[FeedbackService, Depends(get_feedback_service)]


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit product feedback",
    description="Anonymous feedback of type liked, wishlist or bug, up to 500 characters.",
    operation_id="submit_feedback",
)
async def submit_feedback(
    request: Request,
    body: FeedbackCreate,
    feedback_service: FeedbackServiceDep,
) -> ApiResponse:
    result = await feedback_service.submit_feedback(body)
    return create_api_response(data=result, message="Thank you for your feedback!", request=request)


@router.post(
    "/contractor-reviews",
    response_model=ApiResponse,
    summary="Review the installing contractor",
    description="One review per project; submitting again replaces the earlier review.",
    operation_id="submit_contractor_review",
)
async def submit_contractor_review(
    request: Request,
    body: ContractorReviewCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    feedback_service: FeedbackServiceDep,
) -> ApiResponse:
    result = await feedback_service.submit_contractor_review(current_user.user_id, body)
    message = REVIEW_UPDATED if result["updated"] else REVIEW_CREATED
    return create_api_response(data=result, message=message, request=request)
