"""
Main API router that includes all endpoint routers.
"""
from fastapi import APIRouter

from fieldops.api.v1.endpoints import imports


# Create main API router
api_router = APIRouter()

api_router.include_router(
    imports.router,
    prefix="/imports",
    tags=["Imports"]
)
