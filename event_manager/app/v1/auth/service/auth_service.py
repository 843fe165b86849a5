import hashlib
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.exceptions import (
    Conflict,
    Forbidden,
    InvalidCredentials,
    InvalidResetCode,
    NotFound,
    TokenRevoked,
)
from event_manager.app.common.utils.consts import UserRole
from event_manager.app.common.utils.redis_utils import (
    get_from_redis,
    get_redis_key_password_reset,
    pop_from_redis,
    save_to_redis,
)
from event_manager.app.common.utils.send_email import SmtpMailer
from event_manager.app.common.utils.verify_password import (
    generate_reset_code,
    generate_strong_password,
    hash_password,
    verify_password,
)
from event_manager.app.v1.auth.schema.responseDto import TokenPair
from event_manager.app.v1.auth.service.token_service import TokenService
from event_manager.app.v1.user.entity.user import User
from event_manager.app.v1.user.repository.user_repository import UserRepository
from event_manager.config.env import PASSWORD_RESET_TTL

logger = logging.getLogger(__name__)


def _hash_code(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()


class AuthService:
    def __init__(self, user_repo: UserRepository, token_service: TokenService, mailer: SmtpMailer):
        self.user_repo = user_repo
        self.token_service = token_service
        self.mailer = mailer

    async def _notify(self, to: str, subject: str, body: str) -> None:
        try:
            sent = await self.mailer.send(to, subject, body)
        except Exception:
            logger.exception(f"Notification to {to} failed")
            return
        if not sent:
            logger.warning(f"Notification to {to} was not delivered: {subject}")

    async def _create_user(self, session: AsyncSession, email: str, full_name: str, password: str, role: UserRole) -> User:
        async with session.begin():
            if await self.user_repo.get_user_by_email(session, email):
                raise Conflict("Email already in use")
            try:
                user = await self.user_repo.create_user(
                    session,
                    email=email,
                    full_name=full_name,
                    password=hash_password(password),
                    role=role,
                )
            except IntegrityError:
                # a concurrent signup took the email between the check and the insert
                logger.warning(f"Signup race lost for {email}")
                raise Conflict("Email already in use") from None
        logger.info(f"Created user id={user.id} role={role.value}")
        return user

    async def signup(self, session: AsyncSession, email: str, password: str, full_name: str, role: UserRole = UserRole.PARTICIPANT) -> User:
        if role == UserRole.ADMIN:
            raise Forbidden("Admin accounts cannot be self-registered")
        return await self._create_user(session, email, full_name, password, role)

    async def create_user_by_organizer(self, session: AsyncSession, actor: User, email: str, full_name: str, role: UserRole) -> User:
        if role == UserRole.ADMIN and actor.role != UserRole.ADMIN:
            raise Forbidden("Only admins can create admin accounts")
        temp_password = generate_strong_password()
        user = await self._create_user(session, email, full_name, temp_password, role)
        await self._notify(
            user.email,
            "Your Event Management account",
            f"Hi {user.full_name},\n\n"
            f"An account has been created for you with the role {role.value}.\n"
            f"Email: {user.email}\nTemporary password: {temp_password}\n\n"
            "Please log in and change your password.\n\nThanks,\nEvent Management Team",
        )
        return user

    async def login(self, session: AsyncSession, email: str, password: str) -> tuple[User, TokenPair]:
        async with session.begin():
            user = await self.user_repo.get_user_by_email(session, email)
        if user is None or not verify_password(password, user.password):
            logger.warning(f"Failed login attempt for {email}")
            raise InvalidCredentials()

        pair = await self.token_service.issue_token_pair(session, user.id)
        logger.info(f"User id={user.id} logged in")
        return user, pair

    async def refresh(self, session: AsyncSession, refresh_token: str | None) -> TokenPair:
        if not refresh_token:
            raise InvalidCredentials("No refresh token provided")
        try:
            return await self.token_service.rotate_refresh(session, refresh_token)
        except TokenRevoked:
            await self.token_service.revoke_on_reuse(session, refresh_token)
            raise

    async def logout(self, session: AsyncSession, user_id: int) -> int:
        return await self.token_service.revoke_all_for_user(session, user_id)

    async def forgot_password(self, session: AsyncSession, email: str) -> None:
        async with session.begin():
            user = await self.user_repo.get_user_by_email(session, email)
        if user is None:
            raise NotFound("User not found")

        code = generate_reset_code()
        await save_to_redis(get_redis_key_password_reset(user.email), _hash_code(code), PASSWORD_RESET_TTL)
        await self._notify(
            user.email,
            "Password Reset Code",
            f"You requested a password reset. Your code is {code}.\n"
            f"It expires in {PASSWORD_RESET_TTL // 60} minutes.",
        )
        logger.info(f"Password reset code issued for user id={user.id}")

    async def reset_password(self, session: AsyncSession, email: str, code: str, new_password: str) -> None:
        redis_key = get_redis_key_password_reset(email)
        stored = await get_from_redis(redis_key)
        if not stored or stored != _hash_code(code):
            logger.warning(f"Invalid password reset code for {email}")
            raise InvalidResetCode()

        # single use: of two concurrent resets only one gets the code back
        if await pop_from_redis(redis_key) != stored:
            logger.warning(f"Password reset code for {email} was already used")
            raise InvalidResetCode()

        async with session.begin():
            user = await self.user_repo.get_user_by_email(session, email)
            if user is None:
                raise NotFound("User not found")
            await self.user_repo.update_user(session, user, {"password": hash_password(new_password)})

        await self.token_service.revoke_all_for_user(session, user.id)
        logger.info(f"Password reset completed for user id={user.id}")
