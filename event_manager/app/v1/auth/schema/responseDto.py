from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr

from event_manager.app.common.utils.consts import UserRole


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    success: bool = True
    message: str


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    email: EmailStr
    full_name: str
    role: UserRole


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime
    token_type: str = "Bearer"


class LoginResponse(BaseModel):
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserSummary


class RefreshResponse(BaseModel):
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    message: str = "Token refreshed"


class SignupResponse(BaseModel):
    success: bool = True
    message: str
    user: UserSummary
