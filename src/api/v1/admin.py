"""
API v1 admin routes - read-only, gated by the X-Admin-Key header.
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_admin_service, require_admin_key
from src.api.models import AdminUser, AdminUsersResponse, ErrorResponse, StatsBody, StatsResponse
from src.domain.admin import AdminService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_key)],
    responses={401: {"model": ErrorResponse, "description": "Missing or wrong admin key"}},
)


@router.get("/users", response_model=AdminUsersResponse, summary="List verified users")
async def list_users(service: AdminService = Depends(get_admin_service)) -> AdminUsersResponse:
    users = [AdminUser.from_user(user) for user in service.list_users()]
    return AdminUsersResponse(total=len(users), users=users)


@router.get("/stats", response_model=StatsResponse, summary="Account statistics")
async def stats(service: AdminService = Depends(get_admin_service)) -> StatsResponse:
    return StatsResponse(stats=StatsBody.from_stats(service.stats()))
