"""User-related Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from asirnet.stores.base import UserRecord


class RegisterRequest(BaseModel):
    """Schema for account registration."""

    username: str = Field(..., min_length=1, max_length=64, description="Unique username")
    password: str = Field(..., min_length=1, description="Plain-text password; only a digest is kept")
    bio: str | None = Field(None, max_length=500, description="Optional profile text")
    avatar: str | None = Field(None, description="Optional avatar URL or reference")


class LoginRequest(BaseModel):
    username: str = Field(..., description="Username chosen at registration")
    password: str = Field(..., description="Account password")


class ProfileUpdateRequest(BaseModel):
    """Any subset of profile fields; omitted or null fields stay unchanged."""

    username: str | None = Field(None, min_length=1, max_length=64)
    password: str | None = Field(None, min_length=1)
    bio: str | None = Field(None, max_length=500)
    avatar: str | None = None

    model_config = ConfigDict(extra="forbid")


class UserResponse(BaseModel):
    """Public projection of a user; never includes the password digest."""

    id: str
    username: str
    bio: str | None = None
    avatar: str | None = None

    @classmethod
    def from_record(cls, user: UserRecord) -> UserResponse:
        return cls(id=user.id, username=user.username, bio=user.bio, avatar=user.avatar)


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(MessageResponse):
    user: UserResponse


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    user: UserResponse


class ProfileUpdateResponse(MessageResponse):
    user: UserResponse


class UserDeletedResponse(MessageResponse):
    posts_deleted: int
    interactions_deleted: int
