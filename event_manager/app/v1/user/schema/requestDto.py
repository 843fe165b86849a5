from pydantic import BaseModel, ConfigDict, Field

from event_manager.app.common.utils.consts import UserRole


class UpdateUserInfoRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=20)


class UpdatePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(min_length=6, max_length=64)


class UpdateRoleRequest(BaseModel):
    role: UserRole
