"""Admin login and email verification endpoints. None of them need a bearer token."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.database import get_async_session
from bidsmart.schemas.auth import AdminLoginRequest, VerificationCodeRequest, VerifyCodeRequest
from bidsmart.schemas.common import ApiResponse
from bidsmart.services.admin_auth_service import AdminAuthService
from bidsmart.services.verification_service import VerificationService
from bidsmart.utils.logging import get_logger
from bidsmart.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_admin_auth_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> AdminAuthService:
    return AdminAuthService(db_session)


async def get_verification_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> VerificationService:
    return VerificationService(db_session)


VerificationServiceDep = Annotated[VerificationService, Depends(get_verification_service)]


def client_ip(request: Request) -> Optional[str]:
    """Caller address, preferring the proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (request.client.host if request.client else None)


@router.post(
    "/admin/login",
    response_model=ApiResponse,
    summary="Admin login",
    description="Exchange admin credentials for a session token valid for 24 hours.",
    operation_id="admin_login",
)
async def admin_login(
    request: Request,
    body: AdminLoginRequest,
    auth_service: Annotated[AdminAuthService, Depends(get_admin_auth_service)],
) -> ApiResponse:
    session = await auth_service.login(body.email, body.password)
    return create_api_response(data=session, message="Login successful", request=request)


@router.post(
    "/verification/send-code",
    response_model=ApiResponse,
    summary="Email a verification code",
    description="At most three codes per address every 10 minutes; each code expires after 10 minutes.",
    operation_id="send_verification_code",
)
async def send_verification_code(
    request: Request,
    body: VerificationCodeRequest,
    verification_service: VerificationServiceDep,
) -> ApiResponse:
    result = await verification_service.send_code(
        body.email, ip_address=client_ip(request), user_agent=request.headers.get("user-agent")
    )
    return create_api_response(data=result, message=result["message"], request=request)


@router.post(
    "/verification/verify-code",
    response_model=ApiResponse,
    summary="Verify an emailed code",
    operation_id="verify_code",
)
async def verify_code(
    request: Request,
    body: VerifyCodeRequest,
    verification_service: VerificationServiceDep,
) -> ApiResponse:
    session = await verification_service.verify_code(
        body.email, body.code, ip_address=client_ip(request), user_agent=request.headers.get("user-agent")
    )
    return create_api_response(data=session, message="Email verified", request=request)
