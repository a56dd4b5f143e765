"""Login endpoint and the get_current_user dependency that maps a bearer token to a principal."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import (
    InvalidTokenError,
    create_access_token,
    principal_id_from_token,
    token_lifetime_seconds,
    verify_password,
)
from app.models.user import User
from app.schemas.auth import CurrentUser, LoginRequest, TokenResponse

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    user = db.query(User).filter(User.username == body.username).first()
    # Same error for unknown user and wrong password.
    if user is None or not verify_password(body.password, user.password_hash):
        raise _unauthorized("Invalid username or password.")
    token = create_access_token(principal_id=user.id)
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=token_lifetime_seconds(),
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current principal. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Authorization required")
    try:
        principal_id = principal_id_from_token(credentials.credentials)
    except InvalidTokenError as e:
        raise _unauthorized(e.message) from e
    user = db.query(User).filter(User.id == principal_id).first()
    if user is None:
        raise _unauthorized("User not found")
    return CurrentUser(id=user.id, username=user.username)
