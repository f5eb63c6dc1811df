# app/models/workspace.py
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint

from app.db.base import Base
from app.models.user import generate_id, utcnow


class Workspace(Base):
    """
    Top-level tenant that scopes membership and events.
    """

    __tablename__ = "workspaces"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    owner_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Workspace id={self.id} name={self.name}>"


class Member(Base):
    """
    A user's membership (and role) in a workspace.
    """

    __tablename__ = "members"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    workspace_id = Column(
        String(32),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Stored as the Role enum value (OWNER / ADMIN / MEMBER)
    role = Column(String(32), nullable=False)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "workspace_id",
            name="uq_members_user_workspace",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Member user_id={self.user_id} workspace_id={self.workspace_id} "
            f"role={self.role}>"
        )
