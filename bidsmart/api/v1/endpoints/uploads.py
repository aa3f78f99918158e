"""Upload status endpoint."""

from typing import Annotated, Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.auth import get_current_user
from bidsmart.core.database import get_async_session
from bidsmart.schemas.auth import CurrentUser
from bidsmart.services.upload_service import UploadService

router = APIRouter()


async def get_upload_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> UploadService:
    return UploadService(db_session)


@router.get(
    "/{pdf_upload_id}/status",
    response_model=Dict[str, Any],
    summary="Get extraction status",
    description="Progress of one uploaded PDF through MindPal extraction.",
    operation_id="get_extraction_status",
)
async def get_extraction_status(
    pdf_upload_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    upload_service: Annotated[UploadService, Depends(get_upload_service)],
) -> Dict[str, Any]:
    result = await upload_service.get_extraction_status(pdf_upload_id, current_user.user_id)
    return result.model_dump(mode="json", by_alias=True)
