from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from event_manager.app.common.utils.consts import EventType


class EventCreateRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    type: EventType
    venue: str | None = None
    join_link: str | None = None
    contact_info: str = ""
    start_at: datetime
    end_at: datetime
    total_seats: int | None = Field(default=None, ge=1)


class EventUpdateRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    type: EventType | None = None
    venue: str | None = None
    join_link: str | None = None
    contact_info: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    total_seats: int | None = Field(default=None, ge=1)
