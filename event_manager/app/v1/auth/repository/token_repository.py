from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from event_manager.app.v1.auth.entity.refresh_token import RefreshToken


class RefreshTokenRepository:
    async def create(self, session: AsyncSession, user_id: int, token: str, expires_at: datetime) -> RefreshToken:
        row = RefreshToken(user_id=user_id, token=token, expires_at=expires_at)
        session.add(row)
        await session.flush()
        return row

    async def get_by_token(self, session: AsyncSession, token: str, for_update: bool = False) -> RefreshToken | None:
        query = select(RefreshToken).where(RefreshToken.token == token).execution_options(populate_existing=True)
        if for_update:
            query = query.with_for_update()
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def revoke(self, session: AsyncSession, row: RefreshToken, revoked_at: datetime) -> None:
        row.revoked_at = revoked_at
        await session.flush()

    async def revoke_all_for_user(self, session: AsyncSession, user_id: int, revoked_at: datetime) -> int:
        result = await session.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=revoked_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
