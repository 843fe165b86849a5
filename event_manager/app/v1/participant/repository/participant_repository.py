import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from event_manager.app.common.utils.consts import JoinStatus
from event_manager.app.v1.event.entity.event import Event
from event_manager.app.v1.participant.entity.participant import Participant
from event_manager.app.v1.user.entity.user import User

logger = logging.getLogger(__name__)


class ParticipantRepository:
    async def create_participant(self, session: AsyncSession, user_id: int, event_id: int) -> Participant:
        # the (user_id, event_id) unique constraint decides duplicates; flush raises IntegrityError
        participant = Participant(user_id=user_id, event_id=event_id, status=JoinStatus.PENDING)
        session.add(participant)
        await session.flush()
        return participant

    async def get_participant(self, session: AsyncSession, participant_id: int, for_update: bool = False) -> Participant | None:
        query = select(Participant).where(Participant.id == participant_id).execution_options(populate_existing=True)
        if for_update:
            query = query.with_for_update()
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def get_participant_with_event(self, session: AsyncSession, participant_id: int) -> Participant | None:
        query = (
            select(Participant)
            .options(
                selectinload(Participant.user),
                selectinload(Participant.event).selectinload(Event.organizers),
            )
            .where(Participant.id == participant_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def update_status(self, session: AsyncSession, participant: Participant, status: JoinStatus) -> Participant:
        participant.status = status
        await session.flush()
        return participant

    async def delete_participant(self, session: AsyncSession, participant: Participant) -> None:
        await session.delete(participant)
        await session.flush()

    async def event_ids_for_user(self, session: AsyncSession, user_id: int, status: JoinStatus) -> list[int]:
        result = await session.execute(
            select(Participant.event_id).where(Participant.user_id == user_id, Participant.status == status).order_by(Participant.event_id)
        )
        return list(result.scalars().all())

    async def count_by_status(self, session: AsyncSession, event_id: int, status: JoinStatus) -> int:
        count = await session.scalar(
            select(func.count()).select_from(Participant).where(Participant.event_id == event_id, Participant.status == status)
        )
        return count or 0

    async def _paginate(self, session: AsyncSession, conditions: list, page: int, limit: int) -> tuple[list[Participant], int]:
        total = await session.scalar(select(func.count()).select_from(Participant).join(Participant.event).where(*conditions))
        result = await session.execute(
            select(Participant)
            .join(Participant.event)
            .options(selectinload(Participant.user), selectinload(Participant.event))
            .where(*conditions)
            .order_by(Participant.created_at.desc(), Participant.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def list_by_user(
        self, session: AsyncSession, user_id: int, page: int, limit: int, status: JoinStatus | None = None
    ) -> tuple[list[Participant], int]:
        conditions: list = [Participant.user_id == user_id, Event.is_deleted.is_(False)]
        if status:
            conditions.append(Participant.status == status)
        return await self._paginate(session, conditions, page, limit)

    async def list_by_organizer(
        self, session: AsyncSession, organizer_id: int, page: int, limit: int, status: JoinStatus | None = None
    ) -> tuple[list[Participant], int]:
        conditions: list = [Event.is_deleted.is_(False), Event.organizers.any(User.id == organizer_id)]
        if status:
            conditions.append(Participant.status == status)
        return await self._paginate(session, conditions, page, limit)

    async def list_by_event(self, session: AsyncSession, event_id: int, status: JoinStatus | None = None) -> list[Participant]:
        query = (
            select(Participant)
            .options(selectinload(Participant.user), selectinload(Participant.event))
            .where(Participant.event_id == event_id)
            .order_by(Participant.created_at.asc(), Participant.id.asc())
        )
        if status:
            query = query.where(Participant.status == status)
        result = await session.execute(query)
        return list(result.scalars().all())
