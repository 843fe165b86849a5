from pydantic import BaseModel, ConfigDict, EmailStr, Field

from event_manager.app.common.utils.consts import UserRole


class SignupRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    email: EmailStr
    password: str = Field(min_length=6, max_length=64)
    full_name: str = Field(min_length=1, max_length=100)
    role: UserRole = UserRole.PARTICIPANT


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=100)
    role: UserRole


class LoginRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=6, max_length=6)
    new_password: str = Field(min_length=6, max_length=64)
