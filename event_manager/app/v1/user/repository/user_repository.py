import logging

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from event_manager.app.common.utils.consts import UserRole
from event_manager.app.v1.user.entity.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    ALLOWED_USER_FIELDS = {"full_name", "phone", "password", "role"}

    async def _get_user(self, session: AsyncSession, **kwargs) -> User | None:
        query = select(User)
        for key, value in kwargs.items():
            if not hasattr(User, key):
                raise ValueError(f"Invalid field in query parameters: {key}")
            query = query.filter(getattr(User, key) == value)

        result = await session.execute(query)
        user = result.scalars().first()
        if not user:
            logger.debug(f"No user found for query: {kwargs}")
        return user

    async def get_user_by_id(self, session: AsyncSession, user_id: int) -> User | None:
        return await self._get_user(session, id=user_id)

    async def get_user_by_email(self, session: AsyncSession, email: str) -> User | None:
        return await self._get_user(session, email=email.lower())

    async def create_user(self, session: AsyncSession, email: str, full_name: str, password: str, role: UserRole) -> User:
        user = User(email=email.lower(), full_name=full_name, password=password, role=role)
        session.add(user)
        await session.flush()
        return user

    async def update_user(self, session: AsyncSession, user: User, update_data: dict) -> User:
        for key, value in update_data.items():
            if key not in self.ALLOWED_USER_FIELDS:
                raise ValueError(f"Field '{key}' cannot be updated")
            setattr(user, key, value)
        await session.flush()
        return user

    async def delete_user(self, session: AsyncSession, user: User) -> None:
        await session.delete(user)
        await session.flush()

    async def list_users(self, session: AsyncSession, page: int, limit: int, search: str | None = None) -> tuple[list[User], int]:
        conditions = []
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(func.lower(User.full_name).like(pattern), func.lower(User.email).like(pattern)))

        total = await session.scalar(select(func.count()).select_from(User).where(*conditions))
        result = await session.execute(
            select(User).where(*conditions).order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit)
        )
        return list(result.scalars().all()), total or 0
