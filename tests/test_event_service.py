# tests/test_event_service.py
import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.core.exceptions import NotFound, OwnershipMismatch, StoreError
from app.db.session import AsyncSessionLocal
from app.models.event import Event, EventAttendee
from app.models.user import User
from app.models.workspace import Workspace
from app.schemas.event import EventCreate, EventFilters, EventUpdate, PaginationParams
from app.services.event_service import (
    create_event,
    delete_event,
    get_event,
    list_events,
    update_event,
)


def _payload(**overrides) -> EventCreate:
    data = {
        "title": "Sync",
        "date": "2025-06-01",
        "time": "10:00",
        "duration": "30",
        "attendees": ["u1"],
        "meetingLink": "https://meet.example/a",
    }
    data.update(overrides)
    return EventCreate.model_validate(data)


async def _seed_workspaces(session) -> None:
    session.add_all(
        [
            User(id="U", name="Uma", email="uma@example.com"),
            User(id="u1", name="First", email="u1@example.com"),
            User(id="u2", name="Second", email="u2@example.com"),
        ]
    )
    await session.flush()
    session.add_all(
        [
            Workspace(id="W", name="W", owner_id="U"),
            Workspace(id="W2", name="W2", owner_id="U"),
        ]
    )
    await session.commit()


@pytest.mark.asyncio
async def test_create_event_scenario():
    """
    Creating the reference meeting as U in W returns an event owned by W,
    created by U, with the attendee ids exactly as supplied.
    """
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)

        event = await create_event(session, "W", "U", _payload())

        assert event.workspace == "W"
        assert event.created_by == "U"
        assert event.attendees == ["u1"]
        assert event.title == "Sync"
        assert event.meeting_link == "https://meet.example/a"

        stored = await session.execute(
            select(EventAttendee.user_id).where(EventAttendee.event_id == event.id)
        )
        assert list(stored.scalars().all()) == ["u1"]


@pytest.mark.asyncio
async def test_update_replaces_attendees_in_order():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)
        created = await create_event(session, "W", "U", _payload(attendees=["u1", "u2"]))

        updated = await update_event(
            session,
            "W",
            created.id,
            EventUpdate.model_validate({"attendees": ["u2", "x", "u1"]}),
        )

        assert updated.attendees == ["u2", "x", "u1"]
        assert updated.title == "Sync"
        assert updated.created_by == "U"
        assert updated.workspace == "W"


@pytest.mark.asyncio
async def test_update_without_attendees_keeps_them():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)
        created = await create_event(session, "W", "U", _payload(attendees=["u1", "u2"]))

        updated = await update_event(
            session, "W", created.id, EventUpdate.model_validate({"duration": "45"})
        )

        assert updated.duration == "45"
        assert updated.attendees == ["u1", "u2"]


@pytest.mark.asyncio
async def test_update_can_clear_agenda():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)
        created = await create_event(session, "W", "U", _payload(agenda="Notes"))

        updated = await update_event(
            session, "W", created.id, EventUpdate.model_validate({"agenda": None})
        )

        assert updated.agenda is None


@pytest.mark.asyncio
async def test_update_ownership_mismatch_leaves_event_untouched():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)
        created = await create_event(session, "W2", "U", _payload(title="Original"))

        with pytest.raises(OwnershipMismatch):
            await update_event(
                session, "W", created.id, EventUpdate.model_validate({"title": "Changed"})
            )

        stored = await session.get(Event, created.id, populate_existing=True)
        assert stored.title == "Original"
        assert stored.workspace_id == "W2"


@pytest.mark.asyncio
async def test_update_missing_event_not_found():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)

        with pytest.raises(NotFound):
            await update_event(
                session, "W", "missing", EventUpdate.model_validate({"title": "x"})
            )


@pytest.mark.asyncio
async def test_get_event_requires_matching_workspace():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)
        created = await create_event(session, "W", "U", _payload())

        with pytest.raises(NotFound):
            await get_event(session, "W2", created.id)

        fetched = await get_event(session, "W", created.id)
        assert [a.id for a in fetched.attendees] == ["u1"]
        assert fetched.attendees[0].name == "First"


@pytest.mark.asyncio
async def test_delete_removes_event_and_attendee_rows():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)
        created = await create_event(session, "W", "U", _payload(attendees=["u1", "u2"]))

        await delete_event(session, "W", created.id)

        with pytest.raises(NotFound):
            await delete_event(session, "W", created.id)

        rows = await session.execute(
            select(EventAttendee).where(EventAttendee.event_id == created.id)
        )
        assert rows.scalars().all() == []


@pytest.mark.asyncio
async def test_list_empty_workspace_has_zero_pages():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)

        page = await list_events(
            session, "W", EventFilters(), PaginationParams(page_size=10, page_number=1)
        )

        assert page.events == []
        assert page.pagination.total_count == 0
        assert page.pagination.total_pages == 0
        assert page.pagination.skip == 0


@pytest.mark.asyncio
async def test_list_keyword_is_literal_substring():
    """
    LIKE wildcards in the keyword match themselves, not arbitrary text.
    """
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)
        await create_event(session, "W", "U", _payload(title="100% uptime review"))
        await create_event(session, "W", "U", _payload(title="1000 users"))

        page = await list_events(
            session,
            "W",
            EventFilters(keyword="0%"),
            PaginationParams(page_size=10, page_number=1),
        )

        assert [e.title for e in page.events] == ["100% uptime review"]


@pytest.mark.asyncio
async def test_list_pagination_math():
    async with AsyncSessionLocal() as session:
        await _seed_workspaces(session)
        for i in range(7):
            await create_event(session, "W", "U", _payload(title=f"M{i}"))

        page = await list_events(
            session, "W", EventFilters(), PaginationParams(page_size=3, page_number=3)
        )

        assert len(page.events) == 1
        assert page.pagination.total_pages == 3
        assert page.pagination.skip == 6


@pytest.mark.asyncio
async def test_store_failures_surface_as_store_error(monkeypatch):
    async with AsyncSessionLocal() as session:

        async def _boom(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(session, "execute", _boom)

        with pytest.raises(StoreError):
            await get_event(session, "W", "any")


def test_pagination_params_keep_skip_within_64_bits():
    params = PaginationParams(page_size=10, page_number=10**20)

    assert params.skip < 2**63
    assert params.page_number < 10**20
    assert PaginationParams(page_size=10, page_number=3).skip == 20
