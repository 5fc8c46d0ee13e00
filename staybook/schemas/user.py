"""Request/response schemas for user registration, profile and password endpoints."""

from pydantic import BaseModel, Field

from staybook.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)


class UserRequest(BaseModel):
    """Registration payload."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    fullname: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=32)


class UserResponse(BaseModel):
    """User summary returned by registration and the admin list (no password)."""

    id: int
    username: str
    email: str
    fullname: str
    thumbnail_url: str | None = None
    roles: list[str] = Field(default_factory=list)

    class Config:
        from_attributes = True


class UserInfo(BaseModel):
    """Profile view of the caller (no password)."""

    id: int
    username: str
    email: str
    fullname: str
    phone: str
    thumbnail_url: str | None = None
    roles: list[str] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ProfileImage(BaseModel):
    """Image bytes received from a multipart upload, handed to the image store."""

    filename: str
    content_type: str | None = None
    data: bytes


class UserProfileRequest(BaseModel):
    """
    Profile update. None or blank text fields mean "leave unchanged", not "clear".
    """

    email: str | None = Field(default=None, max_length=255, pattern=r"^\s*$|^[^@\s]+@[^@\s]+$")
    fullname: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=32)
    thumbnail: ProfileImage | None = None


class PasswordChangeRequest(BaseModel):
    """Password change for the named user; verify_password must equal new_password."""

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    verify_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class ListingFavorite(BaseModel):
    """Listing summary shown in a user's favorites."""

    id: int
    title: str
    address: str
    price_per_night: float
    thumbnail_url: str | None = None

    class Config:
        from_attributes = True


class UserFavoriteResponse(BaseModel):
    """Favorites of one user."""

    user_id: int
    favorites: list[ListingFavorite] = Field(default_factory=list)
