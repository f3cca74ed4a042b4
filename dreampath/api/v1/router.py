from fastapi import APIRouter

from dreampath.api.v1.endpoints import analytics, data

# Create main API router
api_router = APIRouter(redirect_slashes=False)

# Include all endpoint routers
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
api_router.include_router(data.router, prefix="/data", tags=["Local Data"])
