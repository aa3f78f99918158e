"""Completion notification endpoint, called server to server."""

from typing import Annotated, Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.auth import require_service_role
from bidsmart.core.database import get_async_session
from bidsmart.core.exceptions import ProjectNotFoundError, ValidationError
from bidsmart.services.notification_service import NotificationService

router = APIRouter()


async def get_notification_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> NotificationService:
    return NotificationService(db_session)


@router.post(
    "/completion",
    response_model=Dict[str, Any],
    summary="Send the analysis-complete email",
    description="Emails the homeowner once, if they opted in and left an address.",
    operation_id="send_completion_notification",
    dependencies=[Depends(require_service_role)],
)
async def send_completion_notification(
    request: Request,
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        body = None

    project_id = body.get("project_id") if isinstance(body, dict) else None
    if not project_id:
        raise ValidationError("Missing project_id")

    try:
        project_uuid = UUID(str(project_id))
    except ValueError:
        raise ProjectNotFoundError("Project not found")

    return await notification_service.send_completion_notification(project_uuid)
