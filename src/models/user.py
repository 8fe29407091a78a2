"""User model."""

from sqlalchemy import Column, Integer, LargeBinary, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and task ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False, default=0)
    avatar = Column(LargeBinary, nullable=True)
    avatar_content_type = Column(String(50), nullable=True)

    # Relationships
    # Ordered by insertion: index 0 is the oldest live session
    tokens = relationship(
        "SessionToken",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="SessionToken.id",
    )
    tasks = relationship(
        "Task",
        back_populates="owner",
        cascade="all, delete-orphan",
    )
