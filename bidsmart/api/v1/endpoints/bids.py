"""Bid API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.auth import get_current_user
from bidsmart.core.database import get_async_session
from bidsmart.schemas.auth import CurrentUser
from bidsmart.schemas.common import ApiResponse
from bidsmart.schemas.project import BidUpdate
from bidsmart.services.project_service import ProjectService
from bidsmart.utils.responses import create_api_response

router = APIRouter()


async def get_project_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ProjectService:
    return ProjectService(db_session)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]


@router.get("/{bid_id}", response_model=ApiResponse, summary="Get a bid", operation_id="get_bid")
async def get_bid(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    bid = await project_service.get_bid(bid_id, current_user.user_id)
    return create_api_response(data=bid, message="Bid retrieved successfully", request=request)


@router.patch(
    "/{bid_id}",
    response_model=ApiResponse,
    summary="Correct extracted bid fields",
    operation_id="update_bid",
)
async def update_bid(
    request: Request,
    bid_id: UUID,
    body: BidUpdate,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    bid = await project_service.update_bid(bid_id, current_user.user_id, body)
    return create_api_response(data=bid, message="Bid updated successfully", request=request)


@router.delete("/{bid_id}", response_model=ApiResponse, summary="Delete a bid", operation_id="delete_bid")
async def delete_bid(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    await project_service.delete_bid(bid_id, current_user.user_id)
    return create_api_response(data=None, message="Bid deleted successfully", request=request)


@router.post(
    "/{bid_id}/favorite",
    response_model=ApiResponse,
    summary="Toggle favorite",
    operation_id="toggle_bid_favorite",
)
async def toggle_favorite(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    bid = await project_service.toggle_bid_favorite(bid_id, current_user.user_id)
    return create_api_response(data=bid, message="Favorite updated", request=request)


@router.post(
    "/{bid_id}/verify",
    response_model=ApiResponse,
    summary="Mark a bid as checked by the homeowner",
    operation_id="verify_bid",
)
async def verify_bid(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    bid = await project_service.verify_bid(bid_id, current_user.user_id)
    return create_api_response(data=bid, message="Bid verified", request=request)


@router.get(
    "/{bid_id}/line-items",
    response_model=ApiResponse,
    summary="List line items",
    operation_id="list_bid_line_items",
)
async def list_line_items(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    items = await project_service.list_line_items(bid_id, current_user.user_id)
    return create_api_response(data=items, message="Line items retrieved successfully", request=request)


@router.get(
    "/{bid_id}/equipment",
    response_model=ApiResponse,
    summary="List equipment",
    operation_id="list_bid_equipment",
)
async def list_equipment(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    equipment = await project_service.list_equipment(bid_id, current_user.user_id)
    return create_api_response(data=equipment, message="Equipment retrieved successfully", request=request)


@router.get("/{bid_id}/faqs", response_model=ApiResponse, summary="List FAQs", operation_id="list_bid_faqs")
async def list_faqs(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    faqs = await project_service.list_faqs(bid_id, current_user.user_id)
    return create_api_response(data=faqs, message="FAQs retrieved successfully", request=request)


@router.get(
    "/{bid_id}/questions",
    response_model=ApiResponse,
    summary="List questions to ask the contractor",
    operation_id="list_bid_questions",
)
async def list_questions(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    questions = await project_service.list_questions(bid_id, current_user.user_id)
    return create_api_response(data=questions, message="Questions retrieved successfully", request=request)


@router.get("/{bid_id}/score", response_model=ApiResponse, summary="Get bid score", operation_id="get_bid_score")
async def get_score(
    request: Request,
    bid_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    score = await project_service.get_score(bid_id, current_user.user_id)
    return create_api_response(data=score, message="Score retrieved successfully", request=request)
