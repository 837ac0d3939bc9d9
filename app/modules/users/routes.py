from fastapi import APIRouter, Depends, Query
from typing import Annotated
from app.core.dependencies import RequestContext, get_request_context
from app.modules.users.schemas import (
    Profile, UserListQuery, UserListResponse, RoleUpdate, StatusUpdate,
    BulkDeleteRequest, BulkDeleteResponse, ProfileMutationResponse, ProfileUpdate
)
from app.modules.users.service import UserService

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(ctx: RequestContext = Depends(get_request_context)) -> UserService:
    return UserService(ctx)


@router.get("", response_model=UserListResponse)
async def list_users(
    query: Annotated[UserListQuery, Query()],
    service: UserService = Depends(get_user_service)
):
    """List users with search/role/status filters (admin only)"""
    return service.list_users(query)


@router.get("/me", response_model=Profile)
async def get_me(service: UserService = Depends(get_user_service)):
    """Current caller's own profile"""
    return service.get_me()


@router.patch("/me", response_model=Profile)
async def update_me(
    body: ProfileUpdate,
    service: UserService = Depends(get_user_service)
):
    """Self-service update of name, phone and profile image"""
    return service.update_me(body)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_users(
    body: BulkDeleteRequest,
    service: UserService = Depends(get_user_service)
):
    """Delete several users at once; the caller's own id is skipped"""
    return service.bulk_delete(body)


@router.get("/{user_id}", response_model=Profile)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    return service.get_user(user_id)


@router.put("/{user_id}/role", response_model=ProfileMutationResponse)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    service: UserService = Depends(get_user_service)
):
    return service.update_role(user_id, body)


@router.put("/{user_id}/status", response_model=ProfileMutationResponse)
async def update_user_status(
    user_id: str,
    body: StatusUpdate,
    service: UserService = Depends(get_user_service)
):
    return service.update_status(user_id, body)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    """Delete a user profile (admins cannot delete themselves)"""
    service.delete_user(user_id)
    return None
