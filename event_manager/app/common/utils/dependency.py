import logging
from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.exceptions import Forbidden, NotFound, TokenInvalid
from event_manager.app.common.utils.consts import UserRole
from event_manager.app.common.utils.send_email import SmtpMailer, get_mailer
from event_manager.app.v1.auth.repository.token_repository import RefreshTokenRepository
from event_manager.app.v1.auth.service.auth_service import AuthService
from event_manager.app.v1.auth.service.token_service import TokenService
from event_manager.app.v1.event.repository.event_repository import EventRepository
from event_manager.app.v1.event.service.event_service import EventService
from event_manager.app.v1.participant.repository.participant_repository import ParticipantRepository
from event_manager.app.v1.participant.service.participant_service import ParticipantService
from event_manager.app.v1.user.entity.user import User
from event_manager.app.v1.user.repository.user_repository import UserRepository
from event_manager.app.v1.user.service.user_service import UserService
from event_manager.config.database import SessionLocal

logger = logging.getLogger(__name__)

# the access_token cookie is accepted as well, so the header is optional
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

user_repo = UserRepository()
token_repo = RefreshTokenRepository()
event_repo = EventRepository()
participant_repo = ParticipantRepository()
token_service = TokenService(token_repo=token_repo)


# DB session dependency: one session per request
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session


def get_token_service() -> TokenService:
    return token_service


def get_auth_service(mailer: SmtpMailer = Depends(get_mailer)) -> AuthService:
    return AuthService(user_repo=user_repo, token_service=token_service, mailer=mailer)


def get_user_service() -> UserService:
    return UserService(user_repo=user_repo, participant_repo=participant_repo, event_repo=event_repo)


def get_event_service() -> EventService:
    return EventService(event_repo=event_repo)


def get_participant_service(mailer: SmtpMailer = Depends(get_mailer)) -> ParticipantService:
    return ParticipantService(
        participant_repo=participant_repo,
        event_repo=event_repo,
        user_repo=user_repo,
        mailer=mailer,
    )


async def get_current_user_id(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    access_token = token or request.cookies.get("access_token")
    if not access_token:
        raise TokenInvalid("Please login first to access this resource")
    return tokens.verify_access(access_token)


def require_roles(*roles: UserRole):
    """Load the caller and check the role stored in the database, not the token."""

    async def dependency(
        user_id: int = Depends(get_current_user_id),
        session: AsyncSession = Depends(get_session),
    ) -> User:
        async with session.begin():
            user = await user_repo.get_user_by_id(session, user_id)
        if user is None:
            raise NotFound("User not found")
        if roles and user.role not in roles:
            logger.warning(f"User id={user_id} with role {user.role.value} denied, requires {[r.value for r in roles]}")
            raise Forbidden("Not authorized to access this resource")
        return user

    return dependency
