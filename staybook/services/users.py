"""User workflow: registration, profile reads and updates, password change, favorites."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staybook.core.config import get_settings
from staybook.core.errors import (
    ImageStoreNotConfiguredError,
    InvalidCredentialsError,
    PasswordConfirmMismatchError,
    PasswordInvalidError,
    RoleNotFoundError,
    UserNotFoundError,
    UsernameExistsError,
    UsernameInvalidError,
)
from staybook.core.security import (
    create_access_token,
    hash_password,
    verify_password,
    verify_token_subject,
)
from staybook.models import Role, User
from staybook.models.role import GUEST
from staybook.schemas.user import (
    ListingFavorite,
    PasswordChangeRequest,
    UserFavoriteResponse,
    UserInfo,
    UserProfileRequest,
    UserRequest,
    UserResponse,
)
from staybook.services.mailer import send_welcome_email

if TYPE_CHECKING:
    from staybook.core.config import Settings
    from staybook.services.image_store import CloudinaryImageStore
    from staybook.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


def _find_user(db: Session, username: str | None) -> User | None:
    if not username:
        return None
    return db.query(User).filter(User.username == username).first()


def _require_user(db: Session, username: str | None) -> User:
    user = _find_user(db, username)
    if user is None:
        raise UserNotFoundError()
    return user


def _is_present(value: str | None) -> bool:
    return value is not None and bool(value.strip())


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        fullname=user.fullname,
        thumbnail_url=user.thumbnail_url,
        roles=user.role_names,
    )


def to_user_info(user: User) -> UserInfo:
    return UserInfo(
        id=user.id,
        username=user.username,
        email=user.email,
        fullname=user.fullname,
        phone=user.phone,
        thumbnail_url=user.thumbnail_url,
        roles=user.role_names,
    )


def register_user(
    db: Session,
    request: UserRequest,
    notifier: NotificationDispatcher | None = None,
    settings: Settings | None = None,
) -> UserResponse:
    """
    Create an account with the GUEST role and queue a welcome email.

    The welcome email is queued only after the row is committed, so a rejected
    registration never notifies anyone. The unique index on username is the
    authority: a concurrent insert that wins the race surfaces as UsernameExistsError.
    """
    settings = settings or get_settings()
    if _find_user(db, request.username) is not None:
        raise UsernameExistsError()

    role = db.query(Role).filter(Role.name == GUEST).first()
    if role is None:
        raise RoleNotFoundError(f"Role '{GUEST}' does not exist.")

    user = User(
        username=request.username,
        password_hash=hash_password(request.password),
        email=request.email,
        fullname=request.fullname,
        phone=request.phone,
        thumbnail_url=settings.DEFAULT_THUMBNAIL_URL,
        roles=[role],
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise UsernameExistsError() from e
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.id, "username": user.username})

    if notifier is not None:
        notifier.submit(
            f"welcome-email:{user.username}",
            send_welcome_email,
            settings,
            user.email,
            user.fullname,
        )
    return to_user_response(user)


def authenticate(db: Session, username: str, password: str) -> str:
    """Check credentials and return a signed access token."""
    user = _find_user(db, username)
    if user is None or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()
    return create_access_token(sub=user.username, roles=user.role_names)


def list_users(db: Session) -> list[UserResponse]:
    """All users, unpaginated."""
    users = db.query(User).order_by(User.id).all()
    return [to_user_response(u) for u in users]


def verify_token(token: str) -> str | None:
    """Subject of a verified token, None if it does not verify; TokenParseError if malformed."""
    return verify_token_subject(token)


def get_profile(db: Session, token: str) -> UserInfo:
    username = verify_token(token)
    return to_user_info(_require_user(db, username))


def get_favorites(db: Session, username: str) -> UserFavoriteResponse:
    user = _require_user(db, username)
    return UserFavoriteResponse(
        user_id=user.id,
        favorites=[ListingFavorite.model_validate(listing) for listing in user.favorites],
    )


def update_profile(
    db: Session,
    request: UserProfileRequest,
    username: str,
    image_store: CloudinaryImageStore | None = None,
) -> UserInfo:
    """
    Overwrite email, fullname and phone only when a non-blank value is supplied.

    A supplied thumbnail is uploaded first; if the upload fails nothing is changed.
    """
    user = _require_user(db, username)

    thumbnail_url = None
    if request.thumbnail is not None:
        if image_store is None:
            raise ImageStoreNotConfiguredError()
        thumbnail_url = image_store.upload(request.thumbnail)

    if _is_present(request.email):
        user.email = request.email
    if _is_present(request.fullname):
        user.fullname = request.fullname
    if _is_present(request.phone):
        user.phone = request.phone
    if thumbnail_url:
        user.thumbnail_url = thumbnail_url

    db.commit()
    db.refresh(user)
    return to_user_info(user)


def change_password(db: Session, request: PasswordChangeRequest) -> UserInfo:
    user = _find_user(db, request.username)
    if user is None:
        raise UsernameInvalidError()
    if not verify_password(request.password, user.password_hash):
        raise PasswordInvalidError()
    if request.new_password != request.verify_password:
        raise PasswordConfirmMismatchError()

    user.password_hash = hash_password(request.new_password)
    db.commit()
    db.refresh(user)
    logger.info("Password changed", extra={"user_id": user.id})
    return to_user_info(user)


def count_users(db: Session) -> int:
    return db.query(func.count(User.id)).scalar() or 0
