"""FastAPI application for the BidSmart backend.

Serves the homeowner-facing project API, the MindPal extraction webhook and
the admin cleanup endpoints. Every error leaves as ``{"error": message}``.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from bidsmart.api.v1.endpoints import health
from bidsmart.api.v1.router import api_router
from bidsmart.core.config import settings
from bidsmart.core.database import close_database, init_database
from bidsmart.core.exceptions import AppError
from bidsmart.utils.logging import correlation_id as correlation_id_var, get_logger

LOGGER = get_logger(__name__, level=settings.log_level)

REQUIRED_SECRETS = {
    "MINDPAL_CALLBACK_SECRET": lambda: settings.mindpal_callback_secret,
    "SUPABASE_SERVICE_ROLE_KEY": lambda: settings.supabase_service_role_key,
    "SUPABASE_JWT_SECRET": lambda: settings.supabase_jwt_secret,
}


class RootResponse(BaseModel):
    message: str = Field(..., description="Service status message")
    version: str = Field(..., description="Running application version")
    docs: str = Field(..., description="Path to the interactive API docs")
    health: str = Field(..., description="Path to the health check endpoint")
    webhook: str = Field(..., description="Path MindPal posts extraction results to")


def _report_missing_secrets() -> None:
    # Endpoints that need a missing secret answer 500 instead of refusing to start
    for name, value in REQUIRED_SECRETS.items():
        if not value():
            LOGGER.error(f"{name} is not set; dependent endpoints will fail")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    _report_missing_secrets()
    LOGGER.info(
        f"Starting {settings.app_name} {settings.app_version}",
        extra={"environment": settings.environment},
    )

    try:
        await asyncio.wait_for(
            init_database(auto_migrate=settings.debug),
            timeout=settings.db_init_timeout
        )
    except asyncio.TimeoutError:
        LOGGER.error(f"Database initialization timed out after {settings.db_init_timeout}s")
    except Exception as e:
        LOGGER.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    LOGGER.info("Shutting down")
    await close_database()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Compare HVAC contractor bids extracted from uploaded PDFs",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID", str(uuid4()))
    request.state.correlation_id = correlation_id
    token = correlation_id_var.set(correlation_id)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={"path": request.url.path, "original_error": str(exc.original_error) if exc.original_error else None},
        )
    else:
        LOGGER.warning(f"{exc.__class__.__name__}: {exc.message}", extra={"path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "; ".join(messages)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(api_router, prefix=settings.api_v1_prefix)
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get(
    "/",
    response_model=RootResponse,
    tags=["Root"],
    summary="Service metadata",
    operation_id="get_public_root_metadata",
)
async def root() -> RootResponse:
    return RootResponse(
        message=f"{settings.app_name} API is running",
        version=settings.app_version,
        docs="/docs",
        health="/health",
        webhook=f"{settings.api_v1_prefix}/webhooks/mindpal-callback",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bidsmart.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
