"""User account API endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, File, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_session, get_current_user
from src.database import get_db
from src.models.user import User
from src.schemas.user import AuthResponse, MessageResponse, UserCreate, UserLogin, UserResponse
from src.services import tokens, users
from src.services.tokens import AuthenticatedSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    user_data: UserCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user and start its first session."""
    user, token = users.register_user(db, user_data)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with email and password, appending a new session token."""
    user = users.authenticate_credentials(db, credentials.email, credentials.password)
    token = tokens.issue_token(db, user)
    logger.info(f"User {user.id} logged in")
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    session: Annotated[AuthenticatedSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
):
    """Revoke the session that made this request."""
    tokens.revoke_token(db, session.user, session.token)
    return MessageResponse(message="Logged out successfully")


@router.post("/logoutAll", response_model=MessageResponse)
def logout_all(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Revoke every session of the current user."""
    tokens.revoke_all_tokens(db, current_user)
    return MessageResponse(message="Logged out of all sessions")


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user profile."""
    return current_user


@router.patch("/me", response_model=UserResponse)
def update_me(
    fields: Annotated[dict[str, Any], Body()],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update profile fields. Any unsupported field rejects the whole update."""
    return users.update_user(db, current_user, fields)


@router.delete("/me", response_model=UserResponse)
def delete_me(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete the current user with all its sessions and tasks."""
    deleted = UserResponse.model_validate(current_user)
    users.delete_user(db, current_user)
    return deleted


@router.post("/me/avatar", response_model=MessageResponse)
async def upload_avatar(
    avatar: Annotated[UploadFile, File(description="Avatar image (JPEG or PNG)")],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Upload or replace the current user's avatar.

    Note: This endpoint is async because UploadFile.read() is async.
    """
    data = await avatar.read()
    users.set_avatar(db, current_user, data, avatar.content_type)
    return MessageResponse(message="Avatar uploaded")


@router.delete("/me/avatar", response_model=MessageResponse)
def delete_avatar(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Remove the current user's avatar."""
    users.clear_avatar(db, current_user)
    return MessageResponse(message="Avatar removed")



def avatar_response(user: User | None) -> Response:
    """Build the raw image response, or 404 when there is nothing to serve."""
    if not user or not user.avatar:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Avatar not found")
    return Response(content=user.avatar, media_type=user.avatar_content_type)


@router.get("/me/avatar")
def get_my_avatar(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Serve the current user's avatar image."""
    return avatar_response(current_user)


@router.get("/{user_id}/avatar")
def get_avatar(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Serve a user's avatar image."""
    return avatar_response(users.get_user(db, user_id))
