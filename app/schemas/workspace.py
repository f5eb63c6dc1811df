# app/schemas/workspace.py

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import Field, StringConstraints

from app.core.permissions import Role
from app.schemas.common import CamelModel

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class UserCreate(CamelModel):
    """
    Registration of a user mirrored from the surrounding application.
    """

    name: NonBlankStr = Field(..., examples=["Ada Lovelace"])
    email: NonBlankStr = Field(..., examples=["ada@example.com"])
    profile_picture: str | None = Field(default=None, examples=[None])


class UserRead(CamelModel):
    id: str
    name: str
    email: str
    profile_picture: str | None = None
    created_at: datetime | None = None


class WorkspaceCreate(CamelModel):
    name: NonBlankStr = Field(..., examples=["Platform Team"])
    owner_id: NonBlankStr = Field(
        ...,
        description="User who owns the workspace; becomes its OWNER member.",
    )


class WorkspaceRead(CamelModel):
    id: str
    name: str
    owner_id: str
    created_at: datetime | None = None


class MemberCreate(CamelModel):
    user_id: NonBlankStr
    role: Role = Field(default=Role.MEMBER, examples=["MEMBER"])


class MemberRead(CamelModel):
    id: str
    user_id: str
    workspace_id: str
    role: Role
    joined_at: datetime | None = None
