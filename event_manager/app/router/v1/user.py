from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.utils.consts import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, UserRole
from event_manager.app.common.utils.dependency import (
    get_current_user_id,
    get_session,
    get_user_service,
    require_roles,
)
from event_manager.app.v1.auth.schema.responseDto import MessageResponse
from event_manager.app.v1.user.entity.user import User
from event_manager.app.v1.user.schema.requestDto import (
    UpdatePasswordRequest,
    UpdateRoleRequest,
    UpdateUserInfoRequest,
)
from event_manager.app.v1.user.schema.responseDto import UserInfoResponse, UserListResponse
from event_manager.app.v1.user.service.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserInfoResponse)
async def get_me(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_me(session, user_id)


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: str | None = Query(None),
    _: User = Depends(require_roles(UserRole.ADMIN)),
    session: AsyncSession = Depends(get_session),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.list_users(session, page=page, limit=limit, search=search)


@router.patch("/me", response_model=UserInfoResponse)
async def update_me(
    payload: UpdateUserInfoRequest,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.update_info(session, user_id, payload.model_dump(exclude_unset=True, exclude_none=True))


@router.patch("/me/password", response_model=MessageResponse)
async def update_password(
    payload: UpdatePasswordRequest,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.update_password(session, user_id, payload.old_password, payload.new_password)
    return {"message": "Password updated successfully"}


@router.patch("/{user_id}/role", response_model=UserInfoResponse)
async def update_role(
    user_id: int,
    payload: UpdateRoleRequest,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.ORGANIZER)),
    session: AsyncSession = Depends(get_session),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.update_role(session, current_user, user_id, payload.role)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    _: User = Depends(require_roles(UserRole.ADMIN)),
    session: AsyncSession = Depends(get_session),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.delete_user(session, user_id)
    return {"message": "User deleted successfully"}
