"""
Main API v1 router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from .auth import router as auth_router
from .users import router as users_router

api_router = APIRouter()

# Public + authenticated session routes
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["Authentication"],
)

# User management (admin or profile owner)
api_router.include_router(
    users_router,
    prefix="/users",
    tags=["Users"],
)
