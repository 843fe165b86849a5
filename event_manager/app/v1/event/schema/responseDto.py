from datetime import datetime

from pydantic import BaseModel, ConfigDict

from event_manager.app.common.utils.consts import EventType


class OrganizerInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    full_name: str
    email: str


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    description: str
    type: EventType
    venue: str | None
    join_link: str | None
    contact_info: str
    start_at: datetime
    end_at: datetime
    total_seats: int | None
    confirmed_count: int
    organizers: list[OrganizerInfo]


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    total_pages: int
