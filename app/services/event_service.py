# app/services/event_service.py
from __future__ import annotations

import logging
import math
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound, OwnershipMismatch, StoreError, UpdateFailed
from app.models.event import Event, EventAttendee
from app.models.user import User, utcnow
from app.schemas.event import (
    AttendeeRead,
    EventCreate,
    EventDetailRead,
    EventFilters,
    EventPage,
    EventRead,
    EventUpdate,
    PaginationParams,
    PaginationRead,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _store_guard(db: AsyncSession, action: str) -> AsyncIterator[None]:
    """
    Roll back and re-raise persistence failures as StoreError.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise StoreError(f"Failed to {action}") from exc


# --------------------------------------------------------------------------
# Attendee helpers
# --------------------------------------------------------------------------

async def _write_attendees(
    db: AsyncSession, event_id: str, attendees: list[str]
) -> None:
    if not attendees:
        return
    await db.execute(
        insert(EventAttendee),
        [
            {"event_id": event_id, "position": position, "user_id": user_id}
            for position, user_id in enumerate(attendees)
        ],
    )


async def _attendee_ids(db: AsyncSession, event_id: str) -> list[str]:
    result = await db.execute(
        select(EventAttendee.user_id)
        .where(EventAttendee.event_id == event_id)
        .order_by(EventAttendee.position.asc())
    )
    return list(result.scalars().all())


async def _expanded_attendees(
    db: AsyncSession, event_ids: Iterable[str]
) -> dict[str, list[AttendeeRead]]:
    """
    Expand attendee ids into partial user records, keyed by event id.

    Ids with no matching user are dropped; order within an event is kept.
    """
    event_ids = list(event_ids)
    expanded: dict[str, list[AttendeeRead]] = defaultdict(list)
    if not event_ids:
        return expanded

    stmt = (
        select(
            EventAttendee.event_id,
            User.id,
            User.name,
            User.profile_picture,
        )
        .join(User, User.id == EventAttendee.user_id)
        .where(EventAttendee.event_id.in_(event_ids))
        .order_by(EventAttendee.event_id, EventAttendee.position.asc())
    )
    result = await db.execute(stmt)
    for event_id, user_id, name, profile_picture in result.all():
        expanded[event_id].append(
            AttendeeRead(id=user_id, name=name, profile_picture=profile_picture)
        )
    return expanded


def _event_fields(event: Event) -> dict:
    return {
        "id": event.id,
        "title": event.title,
        "agenda": event.agenda,
        "date": event.date,
        "time": event.time,
        "duration": event.duration,
        "meeting_link": event.meeting_link,
        "created_by": event.created_by,
        "workspace": event.workspace_id,
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


def _to_read(event: Event, attendees: list[str]) -> EventRead:
    return EventRead(**_event_fields(event), attendees=attendees)


def _to_detail(event: Event, attendees: list[AttendeeRead]) -> EventDetailRead:
    return EventDetailRead(**_event_fields(event), attendees=attendees)


# --------------------------------------------------------------------------
# Operations
# --------------------------------------------------------------------------

async def create_event(
    db: AsyncSession,
    workspace_id: str,
    user_id: str,
    payload: EventCreate,
) -> EventRead:
    """
    Schedule a new meeting in `workspace_id` on behalf of `user_id`.

    No duplicate detection is performed; every call inserts a new event.
    """
    async with _store_guard(db, "create event"):
        event = Event(
            title=payload.title,
            agenda=payload.agenda,
            date=payload.date,
            time=payload.time,
            duration=payload.duration,
            meeting_link=payload.meeting_link,
            created_by=user_id,
            workspace_id=workspace_id,
        )
        db.add(event)
        await db.flush()

        await _write_attendees(db, event.id, payload.attendees)
        await db.commit()

    logger.info(
        "Event %s created in workspace %s by user %s", event.id, workspace_id, user_id
    )
    return _to_read(event, list(payload.attendees))


async def update_event(
    db: AsyncSession,
    workspace_id: str,
    event_id: str,
    payload: EventUpdate,
) -> EventRead:
    """
    Apply the supplied fields to an event owned by `workspace_id`.

    The write is a single UPDATE conditioned on both id and workspace, so an
    event can never be modified through a foreign workspace. When nothing
    matches, a read-only lookup tells NotFound apart from OwnershipMismatch.

    Raises
    ------
    NotFound
        No event with this id exists.
    OwnershipMismatch
        The event exists but belongs to another workspace; it is left untouched.
    UpdateFailed
        The update matched, but the event could not be read back afterwards
        (e.g. it was deleted concurrently).
    """
    changes = payload.changes()
    replace_attendees = "attendees" in payload.model_fields_set

    async with _store_guard(db, "update event"):
        stmt = (
            update(Event)
            .where(Event.id == event_id, Event.workspace_id == workspace_id)
            .values(**changes, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)

        if result.rowcount == 0:
            await db.rollback()
            owner = await db.execute(
                select(Event.workspace_id).where(Event.id == event_id)
            )
            if owner.scalar_one_or_none() is None:
                logger.warning("Update of missing event %s", event_id)
                raise NotFound("Event not found.")
            logger.warning(
                "Update of event %s rejected: not in workspace %s",
                event_id,
                workspace_id,
            )
            raise OwnershipMismatch()

        if replace_attendees:
            await db.execute(
                delete(EventAttendee).where(EventAttendee.event_id == event_id)
            )
            await _write_attendees(db, event_id, list(payload.attendees or []))

        await db.commit()

        event = await db.get(Event, event_id, populate_existing=True)
        if event is None:
            raise UpdateFailed()
        attendees = await _attendee_ids(db, event_id)

    logger.info(
        "Event %s updated in workspace %s (%s)",
        event_id,
        workspace_id,
        ", ".join(sorted(payload.model_fields_set)) or "no fields",
    )
    return _to_read(event, attendees)


def _filter_conditions(workspace_id: str, filters: EventFilters) -> list:
    conditions = [Event.workspace_id == workspace_id]

    if filters.attendees:
        conditions.append(
            Event.id.in_(
                select(EventAttendee.event_id).where(
                    EventAttendee.user_id.in_(filters.attendees)
                )
            )
        )

    if filters.keyword:
        escaped = (
            filters.keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        conditions.append(Event.title.ilike(f"%{escaped}%", escape="\\"))

    if filters.date:
        conditions.append(Event.date == filters.date)

    return conditions


async def list_events(
    db: AsyncSession,
    workspace_id: str,
    filters: EventFilters,
    pagination: PaginationParams,
) -> EventPage:
    """
    Return one page of a workspace's events, newest first.

    Filters
    -------
    - attendees: events whose attendee list intersects the given ids.
    - keyword: case-insensitive substring of the title.
    - date: exact match on the date string.

    The page and the total count are separate statements; the count may
    drift from the page under concurrent writes.
    """
    conditions = _filter_conditions(workspace_id, filters)

    async with _store_guard(db, "list events"):
        page_stmt = (
            select(Event)
            .where(*conditions)
            .order_by(Event.created_at.desc(), Event.id.desc())
            .offset(pagination.skip)
            .limit(pagination.page_size)
        )
        count_stmt = select(func.count()).select_from(Event).where(*conditions)

        events = list((await db.execute(page_stmt)).scalars().all())
        total_count = (await db.execute(count_stmt)).scalar_one()
        attendees = await _expanded_attendees(db, (e.id for e in events))

    total_pages = math.ceil(total_count / pagination.page_size)

    return EventPage(
        events=[_to_detail(e, attendees.get(e.id, [])) for e in events],
        pagination=PaginationRead(
            page_size=pagination.page_size,
            page_number=pagination.page_number,
            total_count=total_count,
            total_pages=total_pages,
            skip=pagination.skip,
        ),
    )


async def get_event(
    db: AsyncSession,
    workspace_id: str,
    event_id: str,
) -> EventDetailRead:
    """
    Fetch one event of `workspace_id` with attendees expanded.

    An id that exists in a different workspace is reported as NotFound.
    """
    async with _store_guard(db, "fetch event"):
        result = await db.execute(
            select(Event).where(
                Event.id == event_id,
                Event.workspace_id == workspace_id,
            )
        )
        event = result.scalar_one_or_none()
        if event is None:
            raise NotFound("Event not found.")

        attendees = await _expanded_attendees(db, [event.id])

    return _to_detail(event, attendees.get(event.id, []))


async def delete_event(
    db: AsyncSession,
    workspace_id: str,
    event_id: str,
) -> None:
    """
    Delete an event of `workspace_id` together with its attendee rows.
    """
    async with _store_guard(db, "delete event"):
        result = await db.execute(
            delete(Event)
            .where(Event.id == event_id, Event.workspace_id == workspace_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            logger.warning(
                "Delete of event %s in workspace %s matched nothing",
                event_id,
                workspace_id,
            )
            raise NotFound(
                "Event not found or does not belong to the specified workspace"
            )

        await db.execute(
            delete(EventAttendee).where(EventAttendee.event_id == event_id)
        )
        await db.commit()

    logger.info("Event %s deleted from workspace %s", event_id, workspace_id)
