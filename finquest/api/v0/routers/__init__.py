from fastapi import APIRouter
from .challenges import router as challenges_router
from .enrollments import router as enrollments_router
from .expenses import router as expenses_router

# Create main API router
api_router = APIRouter()

api_router.include_router(challenges_router)  # /challenges
api_router.include_router(enrollments_router)  # /users/{user_id}/challenges
api_router.include_router(expenses_router)  # /users/{user_id}/expenses

__all__ = ["api_router"]
