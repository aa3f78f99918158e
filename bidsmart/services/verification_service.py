"""Email verification codes for looking up an analysis by email.

A six digit code is emailed through Resend and stays valid for 10 minutes.
Each address gets at most three codes per 10 minutes. Without a Resend key the
code is returned in the response instead, so local setups can still sign in.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.exceptions import AuthenticationError, DatabaseError, EmailDeliveryError, RateLimitError
from bidsmart.repositories.verification_repository import (
    EmailVerificationRepository,
    VerifiedSessionRepository,
)
from bidsmart.services.notification_service import ResendEmailClient
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

CODE_TTL = timedelta(minutes=10)
RATE_LIMIT_WINDOW = timedelta(minutes=10)
MAX_CODES_PER_WINDOW = 3
VERIFIED_SESSION_TTL = timedelta(hours=24)

EMAIL_SUBJECT = "Your BidSmart Verification Code"

EMAIL_HTML = """<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #16a34a;">BidSmart Verification Code</h2>
  <p>Use this code to access your bid analysis:</p>
  <div style="background-color: #f3f4f6; padding: 20px; text-align: center; border-radius: 8px; margin: 20px 0;">
    <span style="font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #111827;">{code}</span>
  </div>
  <p style="color: #6b7280; font-size: 14px;">This code expires in 10 minutes.</p>
  <p style="color: #6b7280; font-size: 14px;">If you didn't request this code, you can safely ignore this email.</p>
  <hr style="border: none; border-top: 1px solid #e5e7eb; margin: 20px 0;">
  <p style="color: #9ca3af; font-size: 12px;">BidSmart by TheSwitchIsOn.org - Helping homeowners make informed heat pump decisions.</p>
</div>
"""

EMAIL_TEXT = """Your BidSmart verification code is {code}

This code expires in 10 minutes. If you didn't request this code, you can safely ignore this email.
"""


def generate_code() -> str:
    """Random six digit code, never with a leading zero."""
    return str(100000 + secrets.randbelow(900000))


class VerificationService:
    """Issues and checks email verification codes."""

    def __init__(self, db_session: AsyncSession, email_client: Optional[ResendEmailClient] = None):
        self.verification_repo = EmailVerificationRepository(db_session)
        self.session_repo = VerifiedSessionRepository(db_session)
        self.email_client = email_client or ResendEmailClient()

    async def send_code(
        self, email: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> Dict[str, Any]:
        """Store a new code for ``email`` and mail it.

        Returns:
            ``{message}``, plus ``code`` when no Resend key is configured

        Raises:
            RateLimitError: If the address already got three codes in the window
            EmailDeliveryError: If Resend rejects the message
        """
        email = email.lower()
        now = datetime.now(timezone.utc)

        recent = await self.verification_repo.count_since(email, now - RATE_LIMIT_WINDOW)
        if recent >= MAX_CODES_PER_WINDOW:
            LOGGER.warning(f"Verification code rate limit hit for {email}")
            raise RateLimitError("Too many requests. Please wait before requesting another code.")

        code = generate_code()
        try:
            await self.verification_repo.create(
                email=email,
                code=code,
                expires_at=now + CODE_TTL,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to generate verification code", original_error=e)

        result: Dict[str, Any] = {"message": "Verification code sent to your email"}
        if not self.email_client.api_key:
            LOGGER.info("RESEND_API_KEY not configured, returning the verification code in the response")
            result["code"] = code
            return result

        try:
            await self.email_client.send(
                to=email,
                subject=EMAIL_SUBJECT,
                html=EMAIL_HTML.format(code=code),
                text=EMAIL_TEXT.format(code=code),
            )
        except EmailDeliveryError as e:
            raise EmailDeliveryError("Failed to send verification email", original_error=e)

        LOGGER.info(f"Verification code sent to {email}")
        return result

    async def verify_code(
        self, email: str, code: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> Dict[str, Any]:
        """Consume a code and open a verified session for the address.

        Returns:
            ``{email, sessionToken, expiresAt}``

        Raises:
            AuthenticationError: If no unused, unexpired code matches
        """
        email = email.lower()
        now = datetime.now(timezone.utc)

        verification = await self.verification_repo.find_valid(email, code, now)
        if verification is None:
            raise AuthenticationError("Invalid or expired verification code")

        await self.verification_repo.update(verification.id, verified=True, verified_at=now)

        session_token = secrets.token_hex(32)
        expires_at = now + VERIFIED_SESSION_TTL
        await self.session_repo.create(
            email=email,
            session_token=session_token,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        LOGGER.info(f"Email {email} verified")

        return {"email": email, "sessionToken": session_token, "expiresAt": expires_at.isoformat()}
