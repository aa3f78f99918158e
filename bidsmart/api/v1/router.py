from fastapi import APIRouter

from bidsmart.api.v1.endpoints import admin, auth, bids, feedback, notifications, projects, uploads, webhooks

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(bids.router, prefix="/bids", tags=["Bids"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["Uploads"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])

__all__ = ["api_router"]
