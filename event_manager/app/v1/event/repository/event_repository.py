import logging
from datetime import datetime

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from event_manager.app.common.utils.consts import EventFilter, EventType
from event_manager.app.v1.event.entity.event import Event
from event_manager.app.v1.participant.entity.participant import Participant
from event_manager.app.v1.user.entity.user import User

logger = logging.getLogger(__name__)


class EventRepository:
    ALLOWED_EVENT_FIELDS = {
        "title",
        "description",
        "type",
        "venue",
        "join_link",
        "contact_info",
        "start_at",
        "end_at",
        "total_seats",
    }

    async def create_event(self, session: AsyncSession, organizer: User, event_data: dict) -> Event:
        event = Event(**event_data)
        event.organizers.append(organizer)
        session.add(event)
        await session.flush()
        return event

    async def get_event(self, session: AsyncSession, event_id: int, include_deleted: bool = False) -> Event | None:
        query = (
            select(Event)
            .options(selectinload(Event.organizers))
            .where(Event.id == event_id)
            .execution_options(populate_existing=True)
        )
        if not include_deleted:
            query = query.where(Event.is_deleted.is_(False))
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def get_event_for_update(self, session: AsyncSession, event_id: int) -> Event | None:
        # no eager joins here: postgres refuses FOR UPDATE on the nullable side of an outer join
        query = select(Event).where(Event.id == event_id).with_for_update().execution_options(populate_existing=True)
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def update_event(self, session: AsyncSession, event: Event, update_data: dict) -> Event:
        for key, value in update_data.items():
            if key not in self.ALLOWED_EVENT_FIELDS:
                raise ValueError(f"Field '{key}' cannot be updated")
            setattr(event, key, value)
        await session.flush()
        return event

    async def soft_delete_event(self, session: AsyncSession, event: Event) -> int:
        result = await session.execute(
            delete(Participant).where(Participant.event_id == event.id).execution_options(synchronize_session=False)
        )
        event.is_deleted = True
        event.confirmed_count = 0
        await session.flush()
        return result.rowcount or 0

    @staticmethod
    def _filter_conditions(now: datetime, filter_by: EventFilter | None, search: str | None, event_type: EventType | None) -> tuple[list, list]:
        conditions: list = [Event.is_deleted.is_(False)]
        order_by: list = [Event.start_at.asc()]

        if filter_by == EventFilter.INCOMING:
            conditions.append(Event.start_at > now)
        elif filter_by == EventFilter.PAST:
            conditions.append(Event.end_at < now)
            order_by = [Event.start_at.desc()]
        elif filter_by == EventFilter.LIVE:
            conditions.extend([Event.start_at <= now, Event.end_at >= now])
            order_by = [Event.end_at.asc()]

        if search:
            conditions.append(func.lower(Event.title).like(f"%{search.lower()}%"))
        if event_type:
            conditions.append(Event.type == event_type)
        return conditions, order_by + [Event.id.asc()]

    async def list_events(
        self,
        session: AsyncSession,
        now: datetime,
        page: int,
        limit: int,
        filter_by: EventFilter | None = None,
        search: str | None = None,
        event_type: EventType | None = None,
        organizer_id: int | None = None,
    ) -> tuple[list[Event], int]:
        conditions, order_by = self._filter_conditions(now, filter_by, search, event_type)
        if organizer_id is not None:
            conditions.append(Event.organizers.any(User.id == organizer_id))

        total = await session.scalar(select(func.count()).select_from(Event).where(*conditions))
        result = await session.execute(
            select(Event)
            .options(selectinload(Event.organizers))
            .where(*conditions)
            .order_by(*order_by)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0
