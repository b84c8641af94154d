"""
API v1 package.

Contains versioned API routes for the account registration API.
"""

from fastapi import APIRouter

from src.api.v1.admin import router as admin_router
from src.api.v1.routes import router as accounts_router

router = APIRouter()
router.include_router(accounts_router)
router.include_router(admin_router)

__all__ = ["router"]
