"""Completion notifications.

Two halves live here: ``CompletionNotifier`` is what the callback handler calls
when a project finishes (it only pokes the notification endpoint), and
``NotificationService`` is the endpoint's implementation that emails the
homeowner through Resend, at most once per project.
"""

from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.config import settings
from bidsmart.core.exceptions import (
    APIClientError,
    ConfigurationError,
    EmailDeliveryError,
    ProjectNotFoundError,
)
from bidsmart.repositories.project_repository import ProjectRepository
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

EMAIL_SUBJECT = "Your Heat Pump Bid Analysis is Ready"

EMAIL_HTML = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #16a34a; text-align: center; font-size: 24px;">Your Analysis is Ready!</h1>
  <p>Good news! The analysis for <strong>{project_name}</strong> is complete and ready for you to review.</p>
  <p>We extracted and compared the data from your contractor bids. You can now:</p>
  <ul>
    <li>Compare pricing, warranties, and equipment across all bids</li>
    <li>See which contractor offers the best value for your priorities</li>
    <li>Review questions to ask each contractor</li>
  </ul>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{app_url}" style="display: inline-block; background-color: #16a34a; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; font-weight: 600;">View Your Analysis</a>
  </div>
  <p style="color: #666; font-size: 14px;">When you visit BidSmart, use the "Find My Analysis" button and enter this email address to access your results.</p>
  <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">
  <p style="color: #999; font-size: 12px; text-align: center;">This email was sent by BidSmart, a project of TheSwitchIsOn.org</p>
</body>
</html>
"""

EMAIL_TEXT = """Your Heat Pump Bid Analysis is Ready!

Good news! The analysis for "{project_name}" is complete and ready for you to review.

We extracted and compared the data from your contractor bids. You can now:
- Compare pricing, warranties, and equipment across all bids
- See which contractor offers the best value for your priorities
- Review questions to ask each contractor

View your analysis at: {app_url}

When you visit BidSmart, use the "Find My Analysis" button and enter this email address to access your results.

---
This email was sent by BidSmart, a project of TheSwitchIsOn.org
"""


class CompletionNotifier:
    """Triggers the completion notification endpoint for a project."""

    def __init__(self, url: str | None = None, service_role_key: str | None = None):
        self.url = url or settings.completion_notification_url
        self.service_role_key = service_role_key or settings.supabase_service_role_key

    async def notify(self, project_id: UUID) -> Dict[str, Any]:
        """POST ``{project_id}`` to the notification endpoint.

        Raises:
            APIClientError: If the request fails or is rejected
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.url,
                    headers={
                        "Authorization": f"Bearer {self.service_role_key}",
                        "Content-Type": "application/json",
                    },
                    json={"project_id": str(project_id)},
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            raise APIClientError(f"Notification request failed: {str(e)}", original_error=e)

        if response.status_code >= 400:
            LOGGER.error(
                f"Notification endpoint rejected request: {response.text}",
                extra={"project_id": str(project_id), "status_code": response.status_code},
            )
            raise APIClientError(f"Notification failed: {response.status_code}")

        LOGGER.info(f"Completion notification triggered for project {project_id}")
        return response.json() if response.content else {}


class ResendEmailClient:
    """Minimal client for the Resend email API."""

    def __init__(self):
        self.api_key = settings.email.resend_api_key
        self.api_url = settings.email.resend_api_url
        self.from_address = settings.email.from_address

    async def send(self, to: str, subject: str, html: str, text: str) -> Dict[str, Any]:
        """Send one email.

        Raises:
            ConfigurationError: If RESEND_API_KEY is not set
            EmailDeliveryError: If Resend rejects the message
        """
        if not self.api_key:
            LOGGER.error("RESEND_API_KEY not configured")
            raise ConfigurationError("Email service not configured")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": self.from_address,
                        "to": [to],
                        "subject": subject,
                        "html": html,
                        "text": text,
                    },
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Failed to send email: {str(e)}", original_error=e)

        if response.status_code >= 400:
            LOGGER.error(f"Resend API error: {response.text}")
            raise EmailDeliveryError(f"Failed to send email: {response.status_code}")

        return response.json() if response.content else {}


class NotificationService:
    """Sends the one-time "analysis ready" email for a project."""

    def __init__(self, session: AsyncSession, email_client: ResendEmailClient | None = None):
        self.project_repo = ProjectRepository(session)
        self.email_client = email_client or ResendEmailClient()
        self.app_url = settings.email.app_url

    async def send_completion_notification(self, project_id: UUID) -> Dict[str, Any]:
        """Email the homeowner unless they opted out or were already notified.

        Returns:
            ``{success, skipped, reason}`` when skipped, otherwise
            ``{success, message, email}``
        """
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            LOGGER.error(f"Project not found: {project_id}")
            raise ProjectNotFoundError("Project not found")

        if not project.notify_on_completion:
            return {"success": True, "skipped": True, "reason": "User did not opt in for notifications"}

        if not project.notification_email:
            return {"success": True, "skipped": True, "reason": "No notification email provided"}

        if project.notification_sent_at:
            return {"success": True, "skipped": True, "reason": "Notification already sent"}

        values = {"project_name": project.project_name, "app_url": self.app_url}
        await self.email_client.send(
            to=project.notification_email,
            subject=EMAIL_SUBJECT,
            html=EMAIL_HTML.format(**values),
            text=EMAIL_TEXT.format(**values),
        )

        await self.project_repo.update(project.id, notification_sent_at=datetime.now(timezone.utc))
        LOGGER.info(f"Completion email sent for project {project_id}")

        return {
            "success": True,
            "message": "Notification sent successfully",
            "email": project.notification_email,
        }
