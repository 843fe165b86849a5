"""Session/token manager.

Access tokens are self-contained JWTs checked by signature and expiry only;
they are deliberately not looked up in any revocation store, so a logged-out
access token stays usable until it expires (ACCESS_TOKEN_EXPIRE_MINUTES).
Refresh tokens are JWTs as well, but every one of them is also persisted in
``refresh_tokens`` so it can be revoked server-side and rotated exactly once.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.exceptions import TokenExpired, TokenInvalid, TokenRevoked
from event_manager.app.common.utils.consts import TokenType
from event_manager.app.common.utils.datetime_utils import utcnow
from event_manager.app.common.utils.security import create_access_token, create_refresh_token, decode_token
from event_manager.app.v1.auth.repository.token_repository import RefreshTokenRepository
from event_manager.app.v1.auth.schema.responseDto import TokenPair

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(self, token_repo: RefreshTokenRepository):
        self.token_repo = token_repo

    async def _issue(self, session: AsyncSession, user_id: int) -> TokenPair:
        # runs inside the caller's transaction
        access_token, access_expires_at = create_access_token(user_id)
        refresh_token, refresh_expires_at = create_refresh_token(user_id)
        await self.token_repo.create(session, user_id=user_id, token=refresh_token, expires_at=refresh_expires_at)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_expires_at,
            refresh_expires_at=refresh_expires_at,
        )

    async def issue_token_pair(self, session: AsyncSession, user_id: int) -> TokenPair:
        async with session.begin():
            pair = await self._issue(session, user_id)
        logger.info(f"Issued token pair for user_id={user_id}")
        return pair

    def verify_access(self, token: str) -> int:
        """Return the user id carried by a valid access token."""
        return decode_token(token, TokenType.ACCESS)["sub"]

    async def rotate_refresh(self, session: AsyncSession, old_token: str) -> TokenPair:
        """Exchange a refresh token for a new pair; the old one becomes unusable.

        The stateless check runs first so forged or expired tokens never reach
        the database. Revoking the old row and inserting the new one happen in
        a single transaction.
        """
        payload = decode_token(old_token, TokenType.REFRESH)

        async with session.begin():
            stored = await self.token_repo.get_by_token(session, old_token, for_update=True)
            if stored is None or stored.revoked_at is not None:
                logger.warning(f"Refresh token for user_id={payload['sub']} is unknown or already used")
                raise TokenRevoked()
            if stored.user_id != payload["sub"]:
                raise TokenInvalid()

            now = utcnow()
            if not stored.is_active(now):
                raise TokenExpired()

            await self.token_repo.revoke(session, stored, now)
            pair = await self._issue(session, stored.user_id)

        logger.info(f"Rotated refresh token for user_id={stored.user_id}")
        return pair

    async def revoke_all_for_user(self, session: AsyncSession, user_id: int) -> int:
        async with session.begin():
            revoked = await self.token_repo.revoke_all_for_user(session, user_id, utcnow())
        logger.info(f"Revoked {revoked} refresh token(s) for user_id={user_id}")
        return revoked

    async def revoke_on_reuse(self, session: AsyncSession, token: str) -> bool:
        """Log the owner out everywhere when an already-rotated token comes back.

        Returns True when the token was known and had been revoked before,
        which means either the client or someone holding a stolen copy is
        replaying it.
        """
        async with session.begin():
            stored = await self.token_repo.get_by_token(session, token)
            if stored is None or stored.revoked_at is None:
                return False
            user_id = stored.user_id
            revoked = await self.token_repo.revoke_all_for_user(session, user_id, utcnow())
        logger.warning(f"Refresh token reuse detected for user_id={user_id}; revoked {revoked} active token(s)")
        return True
