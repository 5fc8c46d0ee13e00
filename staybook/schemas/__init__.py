"""Pydantic request/response schemas."""

from staybook.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from staybook.schemas.booking import BookingRequest, BookingResponse
from staybook.schemas.envelope import ApiResponse
from staybook.schemas.health import HealthResponse
from staybook.schemas.user import (
    ListingFavorite,
    PasswordChangeRequest,
    ProfileImage,
    UserFavoriteResponse,
    UserInfo,
    UserProfileRequest,
    UserRequest,
    UserResponse,
)

__all__ = [
    "ApiResponse",
    "BookingRequest",
    "BookingResponse",
    "CurrentUser",
    "HealthResponse",
    "ListingFavorite",
    "LoginRequest",
    "PasswordChangeRequest",
    "ProfileImage",
    "TokenResponse",
    "UserFavoriteResponse",
    "UserInfo",
    "UserProfileRequest",
    "UserRequest",
    "UserResponse",
]
