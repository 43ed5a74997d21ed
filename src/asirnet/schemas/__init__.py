# src/asirnet/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .interaction import (
    CommentCreate,
    CommentResponse,
    ReactionCounts,
    ReactionCreate,
    ReactionResponse,
)
from .post import PostCreate, PostDeletedResponse, PostResponse, PostUpdate
from .user import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RegisterRequest,
    RegisterResponse,
    UserDeletedResponse,
    UserResponse,
)

__all__ = [
    "CommentCreate", "CommentResponse",
    "ReactionCounts", "ReactionCreate", "ReactionResponse",
    "PostCreate", "PostDeletedResponse", "PostResponse", "PostUpdate",
    "LoginRequest", "LoginResponse", "MessageResponse",
    "ProfileUpdateRequest", "ProfileUpdateResponse",
    "RegisterRequest", "RegisterResponse",
    "UserDeletedResponse", "UserResponse",
]
