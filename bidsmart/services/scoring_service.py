"""Bid score recalculation through the Supabase RPC endpoint."""

from typing import Any
from uuid import UUID

import httpx

from bidsmart.core.config import settings
from bidsmart.core.exceptions import APIClientError
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)

SCORE_FUNCTION = "calculate_bid_scores"


class ScoringService:
    """Calls the ``calculate_bid_scores`` database function for a bid."""

    def __init__(self):
        self.url = settings.supabase_url.rstrip("/")
        self.service_role_key = settings.supabase_service_role_key
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
            "Content-Type": "application/json",
        }

    async def calculate_bid_scores(self, bid_id: UUID) -> Any:
        """Recompute the scores of one bid.

        Raises:
            APIClientError: If the RPC call fails
        """
        rpc_url = f"{self.url}/rest/v1/rpc/{SCORE_FUNCTION}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    rpc_url,
                    headers=self.headers,
                    json={"p_bid_id": str(bid_id)},
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            raise APIClientError(f"Score calculation request failed: {str(e)}", original_error=e)

        if response.status_code >= 400:
            LOGGER.error(
                f"Score calculation failed: {response.text}",
                extra={"bid_id": str(bid_id), "status_code": response.status_code},
            )
            raise APIClientError(f"Score calculation failed: {response.status_code}")

        LOGGER.info(f"Scores calculated for bid {bid_id}")
        return response.json() if response.content else None
