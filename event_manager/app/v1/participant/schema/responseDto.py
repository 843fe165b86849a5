from datetime import datetime

from pydantic import BaseModel, ConfigDict

from event_manager.app.common.utils.consts import JoinStatus


class ParticipantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    event_id: int
    status: JoinStatus


class ParticipantUserInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    full_name: str
    email: str


class ParticipantEventInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    start_at: datetime
    end_at: datetime


class ParticipantDetailResponse(ParticipantResponse):
    created_at: datetime | None = None
    user: ParticipantUserInfo | None = None
    event: ParticipantEventInfo | None = None


class ParticipantListResponse(BaseModel):
    items: list[ParticipantDetailResponse]
    total: int
    page: int
    total_pages: int


class ParticipantStatusResponse(BaseModel):
    success: bool = True
    data: ParticipantResponse
    message: str
