from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from app.models.user import UserRole

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.USER
    team: Optional[str] = Field(None, max_length=100)

    @field_validator("username", "team", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value

    @field_validator("team")
    @classmethod
    def blank_team_is_none(cls, value):
        return value or None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value):
        return value.lower()

class LoginRequest(BaseModel):
    # Presence is checked by the auth service so the error message stays uniform
    email: Optional[str] = None
    password: Optional[str] = None

class UserSummary(BaseModel):
    id: str
    username: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True

class UserResponse(UserSummary):
    team: Optional[str] = None
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserSummary

class ProfileResponse(BaseModel):
    success: bool = True
    data: UserResponse

class MessageResponse(BaseModel):
    success: bool = True
    message: str

class Actor(BaseModel):
    """The authenticated requester, passed explicitly into services."""
    id: str
    role: UserRole
    team: Optional[str] = None
