"""Liveness probe used by the hosting platform."""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from bidsmart.core.config import settings
from bidsmart.core.database import db_client

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="healthy, or degraded when the database is unreachable")
    version: str
    service: str
    database: str = Field(..., description="Database probe result")
    database_latency_ms: Optional[float] = None
    webhook_ready: bool = Field(..., description="Whether MINDPAL_CALLBACK_SECRET is configured")


@router.get(
    "/",
    response_model=HealthCheckResponse,
    summary="Health check",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    db_health = await db_client.health_check()

    return HealthCheckResponse(
        status="healthy" if db_health["status"] == "healthy" else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        database=db_health["status"],
        database_latency_ms=db_health.get("latency_ms"),
        webhook_ready=bool(settings.mindpal_callback_secret),
    )
