import logging

from fastapi import APIRouter, Depends, Header, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.utils.consts import UserRole
from event_manager.app.common.utils.dependency import (
    get_auth_service,
    get_current_user_id,
    get_session,
    require_roles,
)
from event_manager.app.common.utils.security import ACCESS_TOKEN_TTL, REFRESH_TOKEN_TTL
from event_manager.app.v1.auth.schema.requestDto import (
    CreateUserRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from event_manager.app.v1.auth.schema.responseDto import (
    LoginResponse,
    MessageResponse,
    RefreshResponse,
    SignupResponse,
    TokenPair,
)
from event_manager.app.v1.auth.service.auth_service import AuthService
from event_manager.app.v1.user.entity.user import User
from event_manager.config.env import SECURE_COOKIE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_token_cookies(response: Response, pair: TokenPair) -> None:
    response.set_cookie(
        key="access_token",
        value=pair.access_token,
        httponly=True,
        secure=SECURE_COOKIE,
        samesite="strict",
        max_age=int(ACCESS_TOKEN_TTL.total_seconds()),
    )
    response.set_cookie(
        key="refresh_token",
        value=pair.refresh_token,
        httponly=True,
        secure=SECURE_COOKIE,
        samesite="strict",
        max_age=int(REFRESH_TOKEN_TTL.total_seconds()),
    )


def _clear_token_cookies(response: Response) -> None:
    response.delete_cookie(key="access_token")
    response.delete_cookie(key="refresh_token")


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    session: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = await auth_service.signup(
        session,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        role=payload.role,
    )
    return {"message": "Account created. Please log in.", "user": user}


@router.post("/create-user", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: CreateUserRequest,
    current_user: User = Depends(require_roles(UserRole.ORGANIZER, UserRole.ADMIN)),
    session: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = await auth_service.create_user_by_organizer(
        session,
        actor=current_user,
        email=payload.email,
        full_name=payload.full_name,
        role=payload.role,
    )
    return {"message": "User created and credentials sent by email", "user": user}


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    user, pair = await auth_service.login(session, email=payload.email, password=payload.password)
    _set_token_cookies(response, pair)
    return {
        "access_token": pair.access_token,
        "refresh_token": pair.refresh_token,
        "expires_in": int(ACCESS_TOKEN_TTL.total_seconds()),
        "user": user,
    }


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    request: Request,
    response: Response,
    payload: RefreshRequest | None = None,
    authorization: str | None = Header(default=None),
    session: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    # cookie first, then bearer header, then body
    refresh_token = request.cookies.get("refresh_token")
    if not refresh_token and authorization and authorization.lower().startswith("bearer "):
        refresh_token = authorization[len("bearer "):].strip()
    if not refresh_token and payload is not None:
        refresh_token = payload.refresh_token

    pair = await auth_service.refresh(session, refresh_token)
    _set_token_cookies(response, pair)
    return {
        "access_token": pair.access_token,
        "refresh_token": pair.refresh_token,
        "expires_in": int(ACCESS_TOKEN_TTL.total_seconds()),
    }


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.logout(session, user_id)
    _clear_token_cookies(response)
    return {"message": "Logged out successfully"}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.forgot_password(session, email=payload.email)
    return {"message": "Password reset code sent to your email"}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.reset_password(session, email=payload.email, code=payload.code, new_password=payload.new_password)
    _clear_token_cookies(response)
    return {"message": "Password has been reset. Please log in again."}
