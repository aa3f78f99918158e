"""MindPal webhook endpoint."""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.database import get_async_session
from bidsmart.core.exceptions import ValidationError
from bidsmart.services.callback.callback_service import CallbackService
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_callback_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> CallbackService:
    return CallbackService(db_session)


@router.post(
    "/mindpal-callback",
    response_model=Dict[str, Any],
    summary="Receive a MindPal extraction result",
    description=(
        "Verifies the HMAC signature, stores the raw payload and turns a successful "
        "extraction into a contractor bid. Failed extractions mark the upload as failed."
    ),
    operation_id="receive_mindpal_callback",
)
async def mindpal_callback(
    request: Request,
    callback_service: Annotated[CallbackService, Depends(get_callback_service)],
) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be a JSON object", original_error=e)

    LOGGER.info(
        "Received MindPal callback",
        extra={"request_id": payload.get("request_id") if isinstance(payload, dict) else None},
    )
    return await callback_service.execute(payload)
