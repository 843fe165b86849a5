from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr

from event_manager.app.common.utils.consts import UserRole


class UserInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    email: EmailStr
    full_name: str
    phone: str | None = None
    role: UserRole
    created_at: datetime | None = None


class UserListResponse(BaseModel):
    users: list[UserInfoResponse]
    total_users: int
    total_pages: int
    current_page: int
