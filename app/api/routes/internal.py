# app/api/routes/internal.py
import logging
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.internal_auth import verify_internal_api_key
from app.core.exceptions import Conflict, NotFound
from app.core.permissions import Role
from app.db.session import get_db
from app.models.user import User
from app.models.workspace import Member, Workspace
from app.schemas.workspace import (
    MemberCreate,
    MemberRead,
    UserCreate,
    UserRead,
    WorkspaceCreate,
    WorkspaceRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(verify_internal_api_key)],
)


@router.post(
    "/users",
    response_model=UserRead,
    status_code=HTTPStatus.CREATED,
    summary="Register a user",
    description=(
        "Mirror a user account from the surrounding application so it can be "
        "added to workspaces and expanded as a meeting attendee.\n\n"
        "Protected via the `X-Internal-Api-Key` header when configured."
    ),
    responses={
        201: {"description": "User registered."},
        401: {"description": "Missing or invalid internal API key (if configured)."},
        409: {"description": "A user with the same email already exists."},
    },
)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserRead:
    """
    Register a user; emails are unique.
    """
    existing = await db.execute(select(User.id).where(User.email == payload.email))
    if existing.scalar_one_or_none() is not None:
        raise Conflict(f"User with email '{payload.email}' already exists.")

    user = User(
        name=payload.name,
        email=payload.email,
        profile_picture=payload.profile_picture,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("User %s registered", user.id)
    return UserRead.model_validate(user)


@router.post(
    "/workspaces",
    response_model=WorkspaceRead,
    status_code=HTTPStatus.CREATED,
    summary="Create a workspace",
    description=(
        "Create a workspace owned by an existing user. The owner is added as "
        "the workspace's first member with the `OWNER` role."
    ),
    responses={
        201: {"description": "Workspace created."},
        401: {"description": "Missing or invalid internal API key (if configured)."},
        404: {"description": "Owner user does not exist."},
    },
)
async def create_workspace(
    payload: WorkspaceCreate,
    db: AsyncSession = Depends(get_db),
) -> WorkspaceRead:
    owner = await db.get(User, payload.owner_id)
    if owner is None:
        raise NotFound("User not found")

    workspace = Workspace(name=payload.name, owner_id=owner.id)
    db.add(workspace)
    await db.flush()

    db.add(Member(user_id=owner.id, workspace_id=workspace.id, role=Role.OWNER.value))
    await db.commit()
    await db.refresh(workspace)

    logger.info("Workspace %s created for owner %s", workspace.id, owner.id)
    return WorkspaceRead.model_validate(workspace)


@router.post(
    "/workspaces/{workspace_id}/members",
    response_model=MemberRead,
    status_code=HTTPStatus.CREATED,
    summary="Add a member to a workspace",
    description="Grant an existing user a role (default `MEMBER`) in the workspace.",
    responses={
        201: {"description": "Member added."},
        401: {"description": "Missing or invalid internal API key (if configured)."},
        404: {"description": "Workspace or user does not exist."},
        409: {"description": "User is already a member of the workspace."},
    },
)
async def add_member(
    payload: MemberCreate,
    workspace_id: str = Path(..., description="Workspace to join."),
    db: AsyncSession = Depends(get_db),
) -> MemberRead:
    """
    Add a membership; a user can hold only one role per workspace.
    """
    if await db.get(Workspace, workspace_id) is None:
        raise NotFound("Workspace not found")
    if await db.get(User, payload.user_id) is None:
        raise NotFound("User not found")

    existing = await db.execute(
        select(Member.id).where(
            Member.user_id == payload.user_id,
            Member.workspace_id == workspace_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict("User is already a member of this workspace")

    member = Member(
        user_id=payload.user_id,
        workspace_id=workspace_id,
        role=payload.role.value,
    )
    db.add(member)
    await db.commit()
    await db.refresh(member)

    logger.info(
        "User %s joined workspace %s as %s",
        payload.user_id,
        workspace_id,
        payload.role.value,
    )
    return MemberRead.model_validate(member)
