"""
API v1 router initialization and setup.
"""
from fastapi import APIRouter
from .endpoints import revenue

api_router = APIRouter()

api_router.include_router(
    revenue.router,
    prefix="/revenue",
    tags=["revenue"]
)
