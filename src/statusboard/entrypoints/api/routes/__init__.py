"""API route modules."""

from fastapi import APIRouter

from statusboard.entrypoints.api.routes.internal import router as internal_router
from statusboard.entrypoints.api.routes.organizations import router as organizations_router
from statusboard.entrypoints.api.routes.public import router as public_router

# Create main API router
api_router = APIRouter()

api_router.include_router(organizations_router)
api_router.include_router(public_router)
api_router.include_router(internal_router)

__all__ = ["api_router"]
