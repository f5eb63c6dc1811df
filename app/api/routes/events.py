# app/api/routes/events.py
from http import HTTPStatus
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.current_user import get_current_user_id
from app.core.config import get_settings
from app.core.exceptions import ValidationError
from app.core.permissions import Permission
from app.db.session import get_db
from app.schemas.event import (
    EventCreate,
    EventDetailResponse,
    EventFilters,
    EventListResponse,
    EventResponse,
    EventUpdate,
    MessageResponse,
    PaginationParams,
)
from app.services import event_service
from app.services.permission_oracle import PermissionOracle, get_permission_oracle

router = APIRouter(prefix="/event", tags=["Events"])

_EVENT_EXAMPLE = {
    "id": "5f0c6a3e9b8d4c1fa2e7b6d5c4a39281",
    "title": "Sync",
    "agenda": None,
    "date": "2025-06-01",
    "time": "10:00",
    "duration": "30",
    "attendees": ["u1"],
    "meetingLink": "https://meet.example/a",
    "createdBy": "U",
    "workspace": "W",
    "createdAt": "2025-05-30T08:12:44Z",
    "updatedAt": "2025-05-30T08:12:44Z",
}

_ERROR_RESPONSES = {
    400: {"description": "Malformed input (field errors listed under `errors`)."},
    401: {"description": "Missing `X-User-Id` header."},
    403: {"description": "Caller is not a member or lacks the required permission."},
    404: {"description": "Workspace or event not found."},
}


def _identifier(value: str, field: str) -> str:
    """
    Path identifiers must be non-empty once trimmed.
    """
    value = value.strip()
    if not value:
        raise ValidationError(errors=[{"field": field, "message": "Required"}])
    return value


def _positive_int(raw: Optional[str], default: int) -> int:
    """
    Parse a page parameter; missing, non-numeric or < 1 falls back to `default`.
    """
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value >= 1 else default


def _split_ids(raw: Optional[str]) -> Optional[list[str]]:
    if raw is None:
        return None
    ids = [part.strip() for part in raw.split(",")]
    return [i for i in ids if i] or None


@router.post(
    "/workspace/{workspace_id}/create",
    response_model=EventResponse,
    status_code=HTTPStatus.OK,
    summary="Schedule a meeting in a workspace",
    description=(
        "Create a new meeting event inside the given workspace.\n\n"
        "Requires the `CREATE_EVENT` permission. The caller becomes the event's "
        "`createdBy`; the path workspace becomes its owning `workspace`."
    ),
    responses={
        200: {
            "description": "Meeting scheduled.",
            "content": {
                "application/json": {
                    "example": {
                        "message": "Meeting scheduled successfully",
                        "event": _EVENT_EXAMPLE,
                    }
                }
            },
        },
        **_ERROR_RESPONSES,
    },
)
async def create_event(
    payload: EventCreate,
    workspace_id: str = Path(..., description="Owning workspace id.", examples=["W"]),
    user_id: str = Depends(get_current_user_id),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db),
) -> EventResponse:
    """
    Create a meeting after checking CREATE_EVENT in the workspace.
    """
    workspace_id = _identifier(workspace_id, "workspaceId")

    await oracle.authorize(db, user_id, workspace_id, [Permission.CREATE_EVENT])

    event = await event_service.create_event(db, workspace_id, user_id, payload)

    return EventResponse(message="Meeting scheduled successfully", event=event)


@router.put(
    "/{event_id}/workspace/{workspace_id}/update",
    response_model=EventResponse,
    status_code=HTTPStatus.OK,
    summary="Reschedule / edit a meeting",
    description=(
        "Update an existing meeting. Only the fields present in the body are "
        "written; `createdBy` and `workspace` can never change.\n\n"
        "Requires the `EDIT_EVENT` permission. An event that exists in another "
        "workspace is rejected with 400 and left untouched."
    ),
    responses={
        200: {"description": "Meeting rescheduled."},
        **_ERROR_RESPONSES,
    },
)
async def update_event(
    payload: EventUpdate,
    event_id: str = Path(..., description="Event id."),
    workspace_id: str = Path(..., description="Workspace the event must belong to."),
    user_id: str = Depends(get_current_user_id),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db),
) -> EventResponse:
    """
    Apply a partial update after checking EDIT_EVENT.
    """
    event_id = _identifier(event_id, "id")
    workspace_id = _identifier(workspace_id, "workspaceId")

    await oracle.authorize(db, user_id, workspace_id, [Permission.EDIT_EVENT])

    event = await event_service.update_event(db, workspace_id, event_id, payload)

    return EventResponse(message="Meeting rescheduled successfully", event=event)


@router.get(
    "/workspace/{workspace_id}/all",
    response_model=EventListResponse,
    status_code=HTTPStatus.OK,
    summary="List meetings of a workspace",
    description=(
        "Return one page of the workspace's meetings, newest first, with "
        "attendees expanded to `{id, name, profilePicture}`.\n\n"
        "- `attendees`: comma-separated user ids; matches events with **any** of them.\n"
        "- `keyword`: case-insensitive substring of the title.\n"
        "- `date`: exact date string.\n"
        "- `pageSize` / `pageNumber`: default 10 / 1; invalid values fall back to the defaults."
    ),
    responses={
        200: {"description": "Page of events with pagination metadata."},
        **_ERROR_RESPONSES,
    },
)
async def list_events(
    workspace_id: str = Path(..., description="Workspace id."),
    attendees: Optional[str] = Query(
        default=None,
        description="Comma-separated attendee user ids.",
        examples=["u1,u2"],
    ),
    keyword: Optional[str] = Query(default=None, examples=["sync"]),
    date: Optional[str] = Query(default=None, examples=["2025-06-01"]),
    page_size: Optional[str] = Query(default=None, alias="pageSize", examples=["10"]),
    page_number: Optional[str] = Query(default=None, alias="pageNumber", examples=["1"]),
    user_id: str = Depends(get_current_user_id),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db),
) -> EventListResponse:
    """
    List workspace events after checking VIEW_ONLY.
    """
    settings = get_settings()
    workspace_id = _identifier(workspace_id, "workspaceId")

    filters = EventFilters(
        attendees=_split_ids(attendees),
        keyword=keyword or None,
        date=date or None,
    )
    pagination = PaginationParams(
        page_size=min(
            _positive_int(page_size, settings.DEFAULT_PAGE_SIZE),
            settings.MAX_PAGE_SIZE,
        ),
        page_number=_positive_int(page_number, 1),
    )

    await oracle.authorize(db, user_id, workspace_id, [Permission.VIEW_ONLY])

    page = await event_service.list_events(db, workspace_id, filters, pagination)

    return EventListResponse(
        message="All events fetched successfully",
        events=page.events,
        pagination=page.pagination,
    )


@router.get(
    "/{event_id}/workspace/{workspace_id}",
    response_model=EventDetailResponse,
    status_code=HTTPStatus.OK,
    summary="Get a meeting by id",
    description=(
        "Fetch a single meeting of the workspace with attendees expanded.\n\n"
        "An id that belongs to a different workspace is reported as 404."
    ),
    responses={
        200: {"description": "Event found."},
        **_ERROR_RESPONSES,
    },
)
async def get_event(
    event_id: str = Path(..., description="Event id."),
    workspace_id: str = Path(..., description="Workspace id."),
    user_id: str = Depends(get_current_user_id),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db),
) -> EventDetailResponse:
    event_id = _identifier(event_id, "id")
    workspace_id = _identifier(workspace_id, "workspaceId")

    await oracle.authorize(db, user_id, workspace_id, [Permission.VIEW_ONLY])

    event = await event_service.get_event(db, workspace_id, event_id)

    return EventDetailResponse(message="Event fetched successfully", event=event)


@router.delete(
    "/{event_id}/workspace/{workspace_id}/delete",
    response_model=MessageResponse,
    status_code=HTTPStatus.OK,
    summary="Cancel a meeting",
    description="Delete a meeting of the workspace. Requires `DELETE_EVENT`.",
    responses={
        200: {
            "description": "Meeting cancelled.",
            "content": {
                "application/json": {
                    "example": {"message": "Meeting cancelled successfully"}
                }
            },
        },
        **_ERROR_RESPONSES,
    },
)
async def delete_event(
    event_id: str = Path(..., description="Event id."),
    workspace_id: str = Path(..., description="Workspace id."),
    user_id: str = Depends(get_current_user_id),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    event_id = _identifier(event_id, "id")
    workspace_id = _identifier(workspace_id, "workspaceId")

    await oracle.authorize(db, user_id, workspace_id, [Permission.DELETE_EVENT])

    await event_service.delete_event(db, workspace_id, event_id)

    return MessageResponse(message="Meeting cancelled successfully")
