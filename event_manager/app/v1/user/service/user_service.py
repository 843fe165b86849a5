import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.exceptions import Forbidden, IncorrectPassword, NotFound
from event_manager.app.common.utils.consts import JoinStatus, UserRole
from event_manager.app.common.utils.verify_password import hash_password, verify_password
from event_manager.app.v1.event.repository.event_repository import EventRepository
from event_manager.app.v1.participant.repository.participant_repository import ParticipantRepository
from event_manager.app.v1.user.entity.user import User
from event_manager.app.v1.user.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository, participant_repo: ParticipantRepository, event_repo: EventRepository):
        self.user_repo = user_repo
        self.participant_repo = participant_repo
        self.event_repo = event_repo

    async def _require_user(self, session: AsyncSession, user_id: int) -> User:
        user = await self.user_repo.get_user_by_id(session, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def get_me(self, session: AsyncSession, user_id: int) -> User:
        async with session.begin():
            return await self._require_user(session, user_id)

    async def list_users(self, session: AsyncSession, page: int, limit: int, search: str | None = None) -> dict:
        async with session.begin():
            users, total = await self.user_repo.list_users(session, page=page, limit=limit, search=search)
        return {
            "users": users,
            "total_users": total,
            "total_pages": math.ceil(total / limit) if total else 0,
            "current_page": page,
        }

    async def update_info(self, session: AsyncSession, user_id: int, update_data: dict) -> User:
        async with session.begin():
            user = await self._require_user(session, user_id)
            await self.user_repo.update_user(session, user, update_data)
        logger.info(f"Updated profile of user id={user_id}: {sorted(update_data)}")
        return user

    async def update_role(self, session: AsyncSession, actor: User, user_id: int, role: UserRole) -> User:
        # organizers may manage participants and organizers, never admins
        if actor.role == UserRole.ORGANIZER and role == UserRole.ADMIN:
            raise Forbidden("Organizers cannot grant the ADMIN role")

        async with session.begin():
            user = await self._require_user(session, user_id)
            if actor.role == UserRole.ORGANIZER and user.role == UserRole.ADMIN:
                raise Forbidden("Organizers cannot change an admin's role")
            await self.user_repo.update_user(session, user, {"role": role})
        logger.info(f"User id={actor.id} changed role of user id={user_id} to {role.value}")
        return user

    async def update_password(self, session: AsyncSession, user_id: int, old_password: str, new_password: str) -> None:
        async with session.begin():
            user = await self._require_user(session, user_id)
            if not verify_password(old_password, user.password):
                raise IncorrectPassword()
            await self.user_repo.update_user(session, user, {"password": hash_password(new_password)})
        logger.info(f"Password updated for user id={user_id}")

    async def delete_user(self, session: AsyncSession, user_id: int) -> None:
        async with session.begin():
            user = await self._require_user(session, user_id)

            # lock the events whose seat count loses this user, in id order
            event_ids = await self.participant_repo.event_ids_for_user(session, user_id, JoinStatus.APPROVED)
            events = [await self.event_repo.get_event_for_update(session, event_id) for event_id in event_ids]

            await self.user_repo.delete_user(session, user)

            for event in events:
                if event is not None:
                    event.confirmed_count = await self.participant_repo.count_by_status(session, event.id, JoinStatus.APPROVED)
            await session.flush()
        logger.info(f"Deleted user id={user_id}, seat counts refreshed for events {event_ids}")
