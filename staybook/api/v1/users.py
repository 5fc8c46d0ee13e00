"""User endpoints: registration, admin listing, profile, favorites, password change."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from staybook.api.v1.auth import get_bearer_token, get_current_user, require_admin
from staybook.api.v1.deps import get_image_store, get_notifier
from staybook.core.database import get_db
from staybook.schemas.auth import CurrentUser
from staybook.schemas.envelope import ApiResponse
from staybook.schemas.user import (
    PasswordChangeRequest,
    ProfileImage,
    UserFavoriteResponse,
    UserInfo,
    UserProfileRequest,
    UserRequest,
    UserResponse,
)
from staybook.services import users as user_service
from staybook.services.image_store import CloudinaryImageStore
from staybook.services.notifications import NotificationDispatcher

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: UserRequest,
    db: Annotated[Session, Depends(get_db)],
    notifier: Annotated[NotificationDispatcher | None, Depends(get_notifier)],
) -> ApiResponse[UserResponse]:
    """Create a GUEST account. The welcome email is sent in the background."""
    return ApiResponse[UserResponse](
        code=status.HTTP_201_CREATED,
        message="create user success",
        result=user_service.register_user(db, body, notifier=notifier),
    )


@router.get("", response_model=ApiResponse[list[UserResponse]])
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[list[UserResponse]]:
    """List all users (admin only)."""
    return ApiResponse[list[UserResponse]](
        code=status.HTTP_200_OK,
        message="get all users",
        result=user_service.list_users(db),
    )


@router.get("/count", response_model=ApiResponse[int])
def count_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[int]:
    return ApiResponse[int](
        code=status.HTTP_200_OK,
        message="count users",
        result=user_service.count_users(db),
    )


@router.get("/infor", response_model=ApiResponse[UserInfo])
def get_infor(
    token: Annotated[str, Depends(get_bearer_token)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[UserInfo]:
    """Profile of the user named by the bearer token's subject."""
    return ApiResponse[UserInfo](
        code=status.HTTP_200_OK,
        message="get user infor",
        result=user_service.get_profile(db, token),
    )


@router.get("/favorites", response_model=ApiResponse[UserFavoriteResponse])
def get_favorites(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse[UserFavoriteResponse]:
    return ApiResponse[UserFavoriteResponse](
        code=status.HTTP_200_OK,
        message="get favorites",
        result=user_service.get_favorites(db, current_user.username),
    )


@router.put("/profile", response_model=ApiResponse[UserInfo])
async def update_profile(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    image_store: Annotated[CloudinaryImageStore, Depends(get_image_store)],
    email: Annotated[str | None, Form()] = None,
    fullname: Annotated[str | None, Form()] = None,
    phone: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse[UserInfo]:
    """
    Update the caller's profile from a multipart form.

    Blank or missing text fields are left unchanged. An optional `thumbnail` file
    replaces the profile image.
    """
    image = None
    if thumbnail is not None and thumbnail.filename:
        image = ProfileImage(
            filename=thumbnail.filename,
            content_type=thumbnail.content_type,
            data=await thumbnail.read(),
        )
    try:
        body = UserProfileRequest(email=email, fullname=fullname, phone=phone, thumbnail=image)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e
    # Image upload and database I/O both block.
    result = await run_in_threadpool(
        user_service.update_profile, db, body, current_user.username, image_store=image_store
    )
    return ApiResponse[UserInfo](
        code=status.HTTP_200_OK,
        message="update profile success",
        result=result,
    )


@router.put("/password", response_model=ApiResponse[UserInfo])
def change_password(
    body: PasswordChangeRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse[UserInfo]:
    """Change the caller's password. The body's username must be the caller's."""
    if body.username != current_user.username:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot change another user's password",
        )
    return ApiResponse[UserInfo](
        code=status.HTTP_200_OK,
        message="change password success",
        result=user_service.change_password(db, body),
    )
