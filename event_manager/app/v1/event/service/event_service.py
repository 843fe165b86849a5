import logging
import math
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.exceptions import Forbidden, InvalidState, NotFound, ValidationFailed
from event_manager.app.common.utils.consts import EventFilter, EventType
from event_manager.app.common.utils.datetime_utils import ensure_utc, utcnow
from event_manager.app.v1.event.entity.event import Event
from event_manager.app.v1.event.repository.event_repository import EventRepository
from event_manager.app.v1.user.entity.user import User

logger = logging.getLogger(__name__)

# columns that may not be cleared by an update
REQUIRED_FIELDS = {"title", "description", "type", "contact_info", "start_at", "end_at"}


def _is_absolute_http_url(link: str | None) -> bool:
    if not link:
        return False
    parsed = urlparse(link)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _validate_event(data: dict) -> None:
    if ensure_utc(data["end_at"]) <= ensure_utc(data["start_at"]):
        raise ValidationFailed("end_at must be after start_at")
    if data["type"] == EventType.ONSITE and not data.get("venue"):
        raise ValidationFailed("Venue is required for onsite events")
    if data["type"] == EventType.ONLINE and not _is_absolute_http_url(data.get("join_link")):
        raise ValidationFailed("A valid http(s) join link is required for online events")


class EventService:
    def __init__(self, event_repo: EventRepository):
        self.event_repo = event_repo

    @staticmethod
    def _normalize(event_data: dict) -> dict:
        for key in ("start_at", "end_at"):
            if event_data.get(key) is not None:
                event_data[key] = ensure_utc(event_data[key])
        return event_data

    async def _get_owned_event(self, session: AsyncSession, user_id: int, event_id: int, lock: bool = False) -> Event:
        if lock:
            # row lock first, so seat checks see what a concurrent decide committed
            await self.event_repo.get_event_for_update(session, event_id)
        event = await self.event_repo.get_event(session, event_id)
        if event is None:
            raise NotFound("Event not found")
        if not event.is_organizer(user_id):
            logger.warning(f"User id={user_id} is not an organizer of event id={event_id}")
            raise Forbidden("Only organizers of this event can modify it")
        return event

    async def create_event(self, session: AsyncSession, organizer: User, event_data: dict) -> Event:
        event_data = self._normalize(dict(event_data))
        _validate_event(event_data)

        async with session.begin():
            event = await self.event_repo.create_event(session, organizer, event_data)
        logger.info(f"Event id={event.id} created by user id={organizer.id}")
        return event

    async def update_event(self, session: AsyncSession, user_id: int, event_id: int, update_data: dict) -> Event:
        update_data = {key: value for key, value in update_data.items() if value is not None or key not in REQUIRED_FIELDS}
        update_data = self._normalize(update_data)

        async with session.begin():
            event = await self._get_owned_event(session, user_id, event_id, lock=True)

            merged = {key: getattr(event, key) for key in self.event_repo.ALLOWED_EVENT_FIELDS}
            merged.update(update_data)
            _validate_event(merged)

            total_seats = merged["total_seats"]
            if total_seats is not None and total_seats < event.confirmed_count:
                raise InvalidState(f"total_seats cannot be lower than the {event.confirmed_count} approved participants")

            await self.event_repo.update_event(session, event, update_data)
        logger.info(f"Event id={event_id} updated by user id={user_id}: {sorted(update_data)}")
        return event

    async def get_event(self, session: AsyncSession, event_id: int) -> Event:
        async with session.begin():
            event = await self.event_repo.get_event(session, event_id)
        if event is None:
            raise NotFound("Event not found")
        return event

    async def list_events(
        self,
        session: AsyncSession,
        page: int,
        limit: int,
        filter_by: EventFilter | None = None,
        search: str | None = None,
        event_type: EventType | None = None,
        organizer_id: int | None = None,
    ) -> dict:
        async with session.begin():
            events, total = await self.event_repo.list_events(
                session,
                now=utcnow(),
                page=page,
                limit=limit,
                filter_by=filter_by,
                search=search,
                event_type=event_type,
                organizer_id=organizer_id,
            )
        return {
            "events": events,
            "total": total,
            "page": page,
            "total_pages": math.ceil(total / limit) if total else 0,
        }

    async def list_my_events(
        self,
        session: AsyncSession,
        organizer_id: int,
        page: int,
        limit: int,
        filter_by: EventFilter | None = None,
        search: str | None = None,
        event_type: EventType | None = None,
    ) -> dict:
        return await self.list_events(session, page, limit, filter_by, search, event_type, organizer_id=organizer_id)

    async def delete_event(self, session: AsyncSession, user_id: int, event_id: int) -> None:
        async with session.begin():
            event = await self._get_owned_event(session, user_id, event_id, lock=True)
            removed = await self.event_repo.soft_delete_event(session, event)
        logger.info(f"Event id={event_id} deleted by user id={user_id}, {removed} participant rows removed")
