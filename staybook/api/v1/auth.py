"""JWT login and auth dependencies (get_current_user, require_admin)."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from staybook.core.database import get_db
from staybook.core.security import decode_access_token
from staybook.models import User
from staybook.models.role import ADMIN
from staybook.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from staybook.schemas.envelope import ApiResponse
from staybook.services import users as user_service

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/token", response_model=ApiResponse[TokenResponse])
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[TokenResponse]:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    token = user_service.authenticate(db, body.username, body.password)
    return ApiResponse[TokenResponse](
        code=status.HTTP_200_OK,
        message="login success",
        result=TokenResponse(access_token=token, token_type="bearer"),
    )


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Dependency: raw bearer token from the Authorization header. Raises 401 if missing."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return credentials.credentials


def get_current_user(
    token: Annotated[str, Depends(get_bearer_token)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the caller. Raises 401 if missing or invalid."""
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    sub = payload.get("sub")
    if not sub:
        raise _unauthorized("Invalid token payload")
    user = db.query(User).filter(User.username == str(sub)).first()
    if user is None:
        raise _unauthorized("User not found")
    return CurrentUser(id=user.id, username=user.username, roles=user.role_names)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role ADMIN. Raises 403 otherwise."""
    if ADMIN not in current_user.roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user
