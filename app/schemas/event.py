# app/schemas/event.py

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    Field,
    StringConstraints,
    TypeAdapter,
    field_validator,
    model_validator,
)

from app.schemas.common import CamelModel

_URL_ADAPTER = TypeAdapter(AnyUrl)

# Largest OFFSET handed to the database; keeps skip inside a signed 64-bit int.
MAX_SKIP = 2**62


def _check_meeting_link(value: str) -> str:
    """
    Require a syntactically valid absolute URL but keep the caller's string.
    """
    try:
        _URL_ADAPTER.validate_python(value)
    except ValueError:
        raise ValueError("Invalid url") from None
    return value


# --------------------------------------------------------------------------
# Field types shared by the create and update payloads
# --------------------------------------------------------------------------

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Title = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
]
Agenda = Annotated[str, StringConstraints(strip_whitespace=True)]
MeetingLink = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1),
    AfterValidator(_check_meeting_link),
]


# --------------------------------------------------------------------------
# Create schema (POST /event/workspace/{workspaceId}/create)
# --------------------------------------------------------------------------

class EventCreate(CamelModel):
    """
    Payload for scheduling a new meeting.
    """

    title: Title = Field(..., description="Meeting title.", examples=["Sync"])
    agenda: Agenda | None = Field(
        default=None,
        description="Optional agenda / description.",
        examples=["Sprint planning follow-up"],
    )
    date: NonBlankStr = Field(..., description="Meeting date.", examples=["2025-06-01"])
    time: NonBlankStr = Field(..., description="Meeting start time.", examples=["10:00"])
    duration: NonBlankStr = Field(
        ..., description="Duration in minutes, as text.", examples=["30"]
    )
    attendees: list[NonBlankStr] = Field(
        ...,
        description="Ordered list of attendee user ids (may be empty).",
        examples=[["u1"]],
    )
    meeting_link: MeetingLink = Field(
        ...,
        description="External meeting URL.",
        examples=["https://meet.example/a"],
    )


# --------------------------------------------------------------------------
# Update schema (PUT /event/{id}/workspace/{workspaceId}/update)
# --------------------------------------------------------------------------

class EventUpdate(CamelModel):
    """
    Partial variant of EventCreate: only the fields present in the payload
    are written. `agenda: null` clears the agenda; null for any other field
    is rejected.
    """

    title: Title | None = None
    agenda: Agenda | None = None
    date: NonBlankStr | None = None
    time: NonBlankStr | None = None
    duration: NonBlankStr | None = None
    attendees: list[NonBlankStr] | None = None
    meeting_link: MeetingLink | None = None

    @field_validator(
        "title", "date", "time", "duration", "attendees", "meeting_link", mode="before"
    )
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def changes(self) -> dict:
        """
        Column values explicitly supplied by the caller, attendees excluded.
        """
        return self.model_dump(exclude_unset=True, exclude={"attendees"})


# --------------------------------------------------------------------------
# Query-side inputs
# --------------------------------------------------------------------------

class EventFilters(BaseModel):
    """
    Optional narrowing applied to the workspace event listing.
    """

    attendees: list[str] | None = None
    keyword: str | None = None
    date: str | None = None


class PaginationParams(BaseModel):
    page_size: int = Field(10, ge=1, le=MAX_SKIP)
    page_number: int = Field(1, ge=1)

    @model_validator(mode="after")
    def _clamp_page_number(self) -> "PaginationParams":
        self.page_number = min(self.page_number, MAX_SKIP // self.page_size + 1)
        return self

    @property
    def skip(self) -> int:
        return (self.page_number - 1) * self.page_size


# --------------------------------------------------------------------------
# Read schemas
# --------------------------------------------------------------------------

class AttendeeRead(CamelModel):
    """
    Partial user record used when expanding attendee ids.
    """

    id: str
    name: str
    profile_picture: str | None = None


class EventRead(CamelModel):
    """
    Event as stored; attendees are returned as ids.
    """

    id: str = Field(..., description="Generated event identifier.")
    title: str
    agenda: str | None = None
    date: str
    time: str
    duration: str
    attendees: list[str] = Field(default_factory=list)
    meeting_link: str
    created_by: str = Field(..., description="User who scheduled the meeting.")
    workspace: str = Field(..., description="Owning workspace identifier.")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EventDetailRead(EventRead):
    """
    Event with attendee ids expanded into partial user records.
    """

    attendees: list[AttendeeRead] = Field(default_factory=list)


class PaginationRead(CamelModel):
    page_size: int
    page_number: int
    total_count: int
    total_pages: int
    skip: int


class EventPage(BaseModel):
    events: list[EventDetailRead]
    pagination: PaginationRead


# --------------------------------------------------------------------------
# Response envelopes
# --------------------------------------------------------------------------

class MessageResponse(BaseModel):
    message: str = Field(..., examples=["Meeting cancelled successfully"])


class EventResponse(MessageResponse):
    event: EventRead


class EventDetailResponse(MessageResponse):
    event: EventDetailRead


class EventListResponse(MessageResponse):
    events: list[EventDetailRead]
    pagination: PaginationRead
