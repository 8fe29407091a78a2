"""User account service: signup, credential checks, profile updates and avatars."""

import logging
from typing import Any

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.database import commit_or_raise
from src.models.user import User
from src.schemas.user import UserCreate, UserUpdate
from src.schemas.validators import validate_partial_update
from src.services.exceptions import ValidationError
from src.services.tokens import issue_token

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALLOWED_AVATAR_TYPES = {"image/jpeg", "image/png"}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def get_user(db: Session, user_id: int) -> User | None:
    """Get a user by id."""
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def register_user(db: Session, data: UserCreate) -> tuple[User, str]:
    """Create a user and its first session token in one transaction.

    Returns:
        Tuple of (user, token). The token is at index 0 of the user's token list.

    Raises:
        ValidationError: If the email is already registered.
        StorageError: If the user or token could not be persisted.
    """
    if get_user_by_email(db, data.email):
        raise ValidationError("Email already registered", field="email")

    user = User(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        age=data.age,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same email
        db.rollback()
        raise ValidationError("Email already registered", field="email") from e

    token = issue_token(db, user)
    logger.info(f"Registered user {user.id}")
    return user, token


def authenticate_credentials(db: Session, email: str, password: str) -> User:
    """Check an email/password pair.

    Unknown email and wrong password fail identically.
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise ValidationError("Unable to login")
    return user


def validate_update(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate a profile update against the mutable-field allow-list."""
    return validate_partial_update(UserUpdate, fields)


def update_user(db: Session, user: User, fields: dict[str, Any]) -> User:
    """Validate and apply a profile update as a single commit.

    Raises:
        ValidationError: On a disallowed or invalid field, or an email owned by someone else.
    """
    updates = validate_update(fields)

    if "email" in updates and updates["email"] != user.email:
        existing = get_user_by_email(db, updates["email"])
        if existing and existing.id != user.id:
            raise ValidationError("Email already registered", field="email")

    for key, value in updates.items():
        if key == "password":
            user.password_hash = hash_password(value)
        else:
            setattr(user, key, value)

    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("Email already registered", field="email") from e

    commit_or_raise(db)
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    """Delete the user together with its tokens, tasks and avatar."""
    user_id = user.id
    db.delete(user)
    commit_or_raise(db)
    logger.info(f"Deleted user {user_id}")


def set_avatar(db: Session, user: User, data: bytes, content_type: str | None) -> User:
    """Store an uploaded avatar image on the user record.

    Raises:
        ValidationError: If the image type is not allowed, or it is empty or too large.
    """
    if content_type not in ALLOWED_AVATAR_TYPES:
        raise ValidationError(
            f"Please upload an image. Allowed types: {', '.join(sorted(ALLOWED_AVATAR_TYPES))}",
            field="avatar",
        )
    if not data:
        raise ValidationError("Avatar file is empty", field="avatar")
    if len(data) > settings.avatar_max_bytes:
        raise ValidationError(
            f"File too large. Maximum size is {settings.avatar_max_bytes} bytes.",
            field="avatar",
        )

    user.avatar = data
    user.avatar_content_type = content_type
    commit_or_raise(db)
    db.refresh(user)
    return user


def clear_avatar(db: Session, user: User) -> User:
    """Remove the user's avatar."""
    user.avatar = None
    user.avatar_content_type = None
    commit_or_raise(db)
    db.refresh(user)
    return user
