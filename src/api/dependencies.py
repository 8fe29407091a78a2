"""FastAPI dependencies for authentication and database."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User
from src.services.exceptions import AuthError
from src.services.tokens import AuthenticatedSession, authenticate

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is rejected with 401 below, not 403
security = HTTPBearer(auto_error=False)


def unauthenticated() -> HTTPException:
    """The single rejection returned for every failed authentication."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Please authenticate.",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> AuthenticatedSession:
    """Resolve the bearer token to a live session or reject the request."""
    if credentials is None or not credentials.credentials:
        raise unauthenticated()

    try:
        return authenticate(db, credentials.credentials)
    except AuthError as e:
        logger.warning(f"Rejected bearer token: {e.reason}")
        raise unauthenticated() from e


def get_current_user(
    session: Annotated[AuthenticatedSession, Depends(get_current_session)],
) -> User:
    """Get the current authenticated user."""
    return session.user
