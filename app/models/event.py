# app/models/event.py
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)

from app.db.base import Base
from app.models.user import generate_id, utcnow


class Event(Base):
    """
    A meeting scheduled inside a workspace.

    `workspace_id` and `created_by` are set once at creation and are never
    part of an update statement.
    """

    __tablename__ = "events"

    id = Column(String(32), primary_key=True, default=generate_id)

    title = Column(String(255), nullable=False)
    agenda = Column(Text, nullable=True)

    # Free-form strings, validated for presence only
    date = Column(String(64), nullable=False, index=True)
    time = Column(String(64), nullable=False)
    duration = Column(String(64), nullable=False)

    meeting_link = Column(String(2048), nullable=False)

    created_by = Column(
        String(32),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    workspace_id = Column(
        String(32),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<Event id={self.id} workspace_id={self.workspace_id} "
            f"date={self.date} title={self.title!r}>"
        )


class EventAttendee(Base):
    """
    One attendee reference of an event; `position` keeps the caller's order.

    `user_id` is not a foreign key: unknown ids are stored as
    given and simply drop out when attendees are expanded.
    """

    __tablename__ = "event_attendees"

    event_id = Column(
        String(32),
        ForeignKey("events.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position = Column(Integer, primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<EventAttendee event_id={self.event_id} user_id={self.user_id}>"
