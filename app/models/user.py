# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String

from app.db.base import Base


def generate_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class User(Base):
    """
    Minimal user profile owned by the surrounding application.

    Only the fields needed to expand event attendees are kept here;
    `password` is never selected for any response.
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    profile_picture = Column(String(2048), nullable=True)
    password = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
