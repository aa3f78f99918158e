"""Async REST client for the BidSmart API, used by the client state controllers."""

from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx

from bidsmart.core.config import settings
from bidsmart.core.exceptions import APIClientError
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BidSmartClient:
    """Thin wrapper over the ``/api/v1`` endpoints.

    CRUD endpoints answer with the standard envelope; this client unwraps
    ``data`` (and ``data.items`` for lists) so callers work with plain dicts.
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        self.base_url = f"{base_url.rstrip('/')}{settings.api_v1_prefix}"
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=settings.http_timeout,
        )

    async def __aenter__(self) -> "BidSmartClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            LOGGER.error(f"{method} {path} failed: {str(e)}")
            raise APIClientError(f"Request failed: {str(e)}", original_error=e)

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            if not isinstance(body, dict):
                body = {}
            message = body.get("error") or body.get("detail") or response.text
            LOGGER.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise APIClientError(f"{response.status_code}: {message}")

        body = response.json() if response.content else {}
        if isinstance(body, dict) and "data" in body and "meta" in body:
            return body["data"]
        return body

    async def _get_items(self, path: str, **kwargs) -> List[Dict[str, Any]]:
        data = await self._request("GET", path, **kwargs)
        return data.get("items", []) if isinstance(data, dict) else []

    async def _get_optional(self, path: str) -> Optional[Dict[str, Any]]:
        data = await self._request("GET", path)
        return data or None

    # Projects

    async def list_projects(self) -> List[Dict[str, Any]]:
        return await self._get_items("/projects")

    async def get_project(self, project_id: UUID | str) -> Optional[Dict[str, Any]]:
        try:
            return await self._get_optional(f"/projects/{project_id}")
        except APIClientError as e:
            if e.message.startswith("404"):
                return None
            raise

    async def create_project(self, project_name: str, status: str = "draft") -> Dict[str, Any]:
        return await self._request(
            "POST", "/projects", json={"project_name": project_name, "status": status}
        )

    async def list_bids(self, project_id: UUID | str) -> List[Dict[str, Any]]:
        return await self._get_items(f"/projects/{project_id}/bids")

    async def get_requirements(self, project_id: UUID | str) -> Optional[Dict[str, Any]]:
        return await self._get_optional(f"/projects/{project_id}/requirements")

    async def list_project_questions(self, project_id: UUID | str) -> List[Dict[str, Any]]:
        return await self._get_items(f"/projects/{project_id}/questions")

    async def start_analysis(
        self,
        project_id: UUID | str,
        pdf_upload_ids: List[UUID | str],
        user_priorities: Dict[str, Any],
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/projects/{project_id}/analysis",
            json={
                "pdf_upload_ids": [str(upload_id) for upload_id in pdf_upload_ids],
                "user_priorities": user_priorities,
            },
        )

    # Bids

    async def list_equipment(self, bid_id: UUID | str) -> List[Dict[str, Any]]:
        return await self._get_items(f"/bids/{bid_id}/equipment")

    async def get_score(self, bid_id: UUID | str) -> Optional[Dict[str, Any]]:
        return await self._get_optional(f"/bids/{bid_id}/score")

    # Uploads

    async def get_extraction_status(self, pdf_upload_id: UUID | str) -> Dict[str, Any]:
        return await self._request("GET", f"/uploads/{pdf_upload_id}/status")

    # Auth

    async def admin_login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._request("POST", "/auth/admin/login", json={"email": email, "password": password})

    async def send_verification_code(self, email: str) -> Dict[str, Any]:
        """Returns ``{message}``, with ``code`` when the server cannot send email."""
        return await self._request("POST", "/auth/verification/send-code", json={"email": email})

    async def verify_code(self, email: str, code: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/auth/verification/verify-code", json={"email": email, "code": code}
        )

    # Feedback

    async def submit_feedback(
        self,
        feedback_type: str,
        message: str,
        url: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/feedback",
            json={"type": feedback_type, "message": message, "url": url, "userAgent": user_agent},
        )

    async def submit_contractor_review(self, review: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/feedback/contractor-reviews", json=review)
