"""Session token model."""

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class SessionToken(Base, TimestampMixin):
    """One entry in a user's active-token list.

    Each row is a live session. Logging in inserts a row and logging out deletes
    one, so the list is never rewritten as a whole.
    """

    __tablename__ = "session_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token = Column(Text, unique=True, nullable=False)

    # Relationships
    user = relationship("User", back_populates="tokens")
