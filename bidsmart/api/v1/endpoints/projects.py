"""Project API endpoints: projects, their uploads, bids, questions and requirements."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.auth import get_current_user
from bidsmart.core.database import get_async_session
from bidsmart.schemas.auth import CurrentUser
from bidsmart.schemas.common import ApiResponse
from bidsmart.schemas.project import (
    AnalysisRequest,
    DataSharingConsentUpdate,
    NotificationSettingsUpdate,
    PdfUploadCreate,
    ProjectCreate,
    ProjectStatusUpdate,
    ProjectUpdate,
    RequirementsUpdate,
)
from bidsmart.services.analysis_service import AnalysisService
from bidsmart.services.project_service import ProjectService
from bidsmart.utils.logging import get_logger
from bidsmart.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_project_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ProjectService:
    return ProjectService(db_session)


async def get_analysis_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> AnalysisService:
    return AnalysisService(db_session)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]


@router.get(
    "",
    response_model=ApiResponse,
    summary="List projects",
    description="The user's projects, newest first, plus public demo projects.",
    operation_id="list_projects",
)
async def list_projects(
    request: Request,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
    include_public_demos: bool = Query(True),
) -> ApiResponse:
    projects = await project_service.list_projects(
        current_user.user_id, include_public_demos=include_public_demos
    )
    return create_api_response(data=projects, message="Projects retrieved successfully", request=request)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
    operation_id="create_project",
)
async def create_project(
    request: Request,
    body: ProjectCreate,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    project = await project_service.create_project(current_user.user_id, body)
    return create_api_response(data=project, message="Project created successfully", request=request)


@router.get(
    "/{project_id}",
    response_model=ApiResponse,
    summary="Get a project",
    operation_id="get_project",
)
async def get_project(
    request: Request,
    project_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    project = await project_service.get_project(project_id, current_user.user_id)
    return create_api_response(data=project, message="Project retrieved successfully", request=request)


@router.patch(
    "/{project_id}",
    response_model=ApiResponse,
    summary="Update a project",
    operation_id="update_project",
)
async def update_project(
    request: Request,
    project_id: UUID,
    body: ProjectUpdate,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    project = await project_service.update_project(project_id, current_user.user_id, body)
    return create_api_response(data=project, message="Project updated successfully", request=request)


@router.delete(
    "/{project_id}",
    response_model=ApiResponse,
    summary="Delete a project",
    description="Deletes the project together with its uploads, bids and requirements.",
    operation_id="delete_project",
)
async def delete_project(
    request: Request,
    project_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    await project_service.delete_project(project_id, current_user.user_id)
    return create_api_response(data=None, message="Project deleted successfully", request=request)


@router.put(
    "/{project_id}/status",
    response_model=ApiResponse,
    summary="Set project status",
    operation_id="update_project_status",
)
async def update_project_status(
    request: Request,
    project_id: UUID,
    body: ProjectStatusUpdate,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    project = await project_service.update_status(project_id, current_user.user_id, body.status)
    return create_api_response(data=project, message="Project status updated", request=request)


@router.put(
    "/{project_id}/notifications",
    response_model=ApiResponse,
    summary="Update completion email settings",
    operation_id="update_notification_settings",
)
async def update_notification_settings(
    request: Request,
    project_id: UUID,
    body: NotificationSettingsUpdate,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    project = await project_service.update_notification_settings(project_id, current_user.user_id, body)
    return create_api_response(data=project, message="Notification settings updated", request=request)


@router.put(
    "/{project_id}/data-sharing",
    response_model=ApiResponse,
    summary="Record data sharing consent",
    operation_id="update_data_sharing_consent",
)
async def update_data_sharing_consent(
    request: Request,
    project_id: UUID,
    body: DataSharingConsentUpdate,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    project = await project_service.update_data_sharing_consent(project_id, current_user.user_id, body)
    return create_api_response(data=project, message="Data sharing consent updated", request=request)


@router.post(
    "/{project_id}/reruns",
    response_model=ApiResponse,
    summary="Count an analysis re-run",
    operation_id="increment_project_rerun_count",
)
async def increment_rerun_count(
    request: Request,
    project_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    rerun_count = await project_service.increment_rerun_count(project_id, current_user.user_id)
    return create_api_response(data={"rerun_count": rerun_count}, message="Re-run recorded", request=request)


@router.get(
    "/{project_id}/summary",
    response_model=ApiResponse,
    summary="Get the comparison summary",
    description="Bids with line items, equipment, FAQs and scores, plus price statistics.",
    operation_id="get_project_summary",
)
async def get_project_summary(
    request: Request,
    project_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    summary = await project_service.get_project_summary(project_id, current_user.user_id)
    return create_api_response(data=summary, message="Project summary retrieved successfully", request=request)


@router.get(
    "/{project_id}/uploads",
    response_model=ApiResponse,
    summary="List uploaded PDFs",
    operation_id="list_project_uploads",
)
async def list_uploads(
    request: Request,
    project_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    uploads = await project_service.list_uploads(project_id, current_user.user_id)
    return create_api_response(data=uploads, message="Uploads retrieved successfully", request=request)


@router.post(
    "/{project_id}/uploads",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an uploaded PDF",
    description="Records a PDF already stored in the bid bucket.",
    operation_id="create_project_upload",
)
async def create_upload(
    request: Request,
    project_id: UUID,
    body: PdfUploadCreate,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    upload = await project_service.create_upload(project_id, current_user.user_id, body)
    return create_api_response(data=upload, message="Upload registered successfully", request=request)


@router.get(
    "/{project_id}/bids",
    response_model=ApiResponse,
    summary="List bids",
    operation_id="list_project_bids",
)
async def list_bids(
    request: Request,
    project_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    bids = await project_service.list_bids(project_id, current_user.user_id)
    return create_api_response(data=bids, message="Bids retrieved successfully", request=request)


@router.get(
    "/{project_id}/questions",
    response_model=ApiResponse,
    summary="List contractor questions",
    operation_id="list_project_questions",
)
async def list_questions(
    request: Request,
    project_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    questions = await project_service.list_project_questions(project_id, current_user.user_id)
    return create_api_response(data=questions, message="Questions retrieved successfully", request=request)


@router.get(
    "/{project_id}/requirements",
    response_model=ApiResponse,
    summary="Get homeowner requirements",
    operation_id="get_project_requirements",
)
async def get_requirements(
    request: Request,
    project_id: UUID,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    requirements = await project_service.get_requirements(project_id, current_user.user_id)
    return create_api_response(data=requirements, message="Requirements retrieved successfully", request=request)


@router.put(
    "/{project_id}/requirements",
    response_model=ApiResponse,
    summary="Save homeowner requirements",
    description="Creates or replaces the questionnaire answers and marks them completed.",
    operation_id="save_project_requirements",
)
async def save_requirements(
    request: Request,
    project_id: UUID,
    body: RequirementsUpdate,
    current_user: CurrentUserDep,
    project_service: ProjectServiceDep,
) -> ApiResponse:
    requirements = await project_service.save_requirements(project_id, current_user.user_id, body)
    return create_api_response(data=requirements, message="Requirements saved successfully", request=request)


@router.post(
    "/{project_id}/analysis",
    response_model=ApiResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start MindPal analysis",
    description="Sends the selected PDFs to the MindPal workflow; results arrive through the webhook.",
    operation_id="start_project_analysis",
)
async def start_analysis(
    request: Request,
    project_id: UUID,
    body: AnalysisRequest,
    current_user: CurrentUserDep,
    analysis_service: Annotated[AnalysisService, Depends(get_analysis_service)],
) -> ApiResponse:
    result = await analysis_service.execute(project_id, current_user.user_id, body)
    return create_api_response(data=result, message=result["message"], request=request)
