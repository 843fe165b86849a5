from typing import Literal

from pydantic import BaseModel


class JoinEventRequest(BaseModel):
    event_id: int


class UpdateParticipantStatusRequest(BaseModel):
    status: Literal["APPROVED", "REJECTED"]
