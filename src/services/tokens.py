"""Session token issuing, validation and revocation.

A session token is a signed JWT carrying the owner's id. The signature proves
authenticity without touching the database, but a token is only *live* while
its exact string is present in the owner's active-token list. Logging out
removes it from that list, which is how a still-valid signature gets revoked.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy import delete
from sqlalchemy.orm import Session

from src.config import get_settings
from src.database import commit_or_raise
from src.models.session_token import SessionToken
from src.models.user import User
from src.services.exceptions import AuthError

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass(frozen=True)
class AuthenticatedSession:
    """A resolved caller: the owning user and the exact token they presented."""

    user: User
    token: str


def create_session_token(user_id: int) -> str:
    """Create a signed token bound to a user id.

    The random ``jti`` claim keeps two tokens issued in the same second distinct.
    """
    now = datetime.now(UTC)
    to_encode = {
        "sub": str(user_id),
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expiration_minutes),
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> int:
    """Verify a token's signature and expiry and return the embedded user id.

    Raises:
        AuthError: ``"malformed"`` if the token cannot be verified or carries no usable id.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthError("malformed") from e

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as e:
        raise AuthError("malformed") from e


def issue_token(db: Session, user: User) -> str:
    """Create a token for the user, append it to the active list and commit.

    If ``user`` is still pending in ``db`` it is committed in the same
    transaction, so signup never leaves a user without its first session.

    Raises:
        StorageError: If the token could not be persisted. The token is discarded.
    """
    if user.id is None:
        db.flush()
    token = create_session_token(user.id)
    db.add(SessionToken(user_id=user.id, token=token))
    commit_or_raise(db)
    return token


def authenticate(db: Session, token: str) -> AuthenticatedSession:
    """Resolve a presented token to its live session.

    Checks, in order: signature, owner existence, active-list membership.

    Raises:
        AuthError: ``"malformed"``, ``"unknown user"`` or ``"revoked"``.
    """
    user_id = decode_session_token(token)

    user = db.get(User, user_id)
    if user is None:
        raise AuthError("unknown user")

    live = (
        db.query(SessionToken.id)
        .filter(SessionToken.user_id == user.id, SessionToken.token == token)
        .first()
    )
    if live is None:
        raise AuthError("revoked")

    return AuthenticatedSession(user=user, token=token)


def revoke_token(db: Session, user: User, token: str) -> None:
    """Remove one session from the user's active list. No-op if already gone."""
    db.execute(
        delete(SessionToken).where(SessionToken.user_id == user.id, SessionToken.token == token)
    )
    commit_or_raise(db)
    logger.info(f"Revoked session for user {user.id}")


def revoke_all_tokens(db: Session, user: User) -> None:
    """Empty the user's active-token list."""
    db.execute(delete(SessionToken).where(SessionToken.user_id == user.id))
    commit_or_raise(db)
    logger.info(f"Revoked all sessions for user {user.id}")
