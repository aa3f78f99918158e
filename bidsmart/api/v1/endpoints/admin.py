"""Admin cleanup endpoints, limited to the super-admin email list."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.auth import require_admin
from bidsmart.core.database import get_async_session
from bidsmart.schemas.common import ApiResponse
from bidsmart.schemas.project import AdminBatchDeleteRequest
from bidsmart.services.admin_service import AdminService
from bidsmart.utils.logging import get_logger
from bidsmart.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


async def get_admin_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> AdminService:
    return AdminService(db_session)


AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]


@router.get(
    "/projects",
    response_model=ApiResponse,
    summary="List projects of all users",
    description="Newest 100 projects, or with stuck=true the ones idle in draft/uploading/analyzing for over an hour.",
    operation_id="admin_list_projects",
)
async def list_projects(
    request: Request,
    admin_service: AdminServiceDep,
    stuck: bool = Query(False),
) -> ApiResponse:
    if stuck:
        projects = await admin_service.list_stuck_projects()
    else:
        projects = await admin_service.list_projects()
    return create_api_response(data={"projects": projects}, message="Projects retrieved successfully", request=request)


@router.delete(
    "/projects/{project_id}",
    summary="Delete a project and everything under it",
    operation_id="admin_delete_project",
)
async def delete_project(project_id: UUID, admin_service: AdminServiceDep) -> JSONResponse:
    result = await admin_service.delete_project(project_id)
    return JSONResponse(content=result, status_code=200 if result["success"] else 500)


@router.post(
    "/projects/batch-delete",
    summary="Delete several projects",
    operation_id="admin_delete_projects",
)
async def delete_projects(body: AdminBatchDeleteRequest, admin_service: AdminServiceDep) -> JSONResponse:
    result = await admin_service.delete_projects(body.project_ids)
    LOGGER.info(result["message"])
    return JSONResponse(content=result)
