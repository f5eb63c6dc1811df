# app/db/session.py
from collections.abc import AsyncGenerator

from sqlalchemy import create_engine as create_sync_engine
from sqlalchemy import event as sa_event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import get_settings
from app.db.base import Base

# Import ORM models so that Base.metadata is aware of them before create_all.
from app.models import event, user, workspace  # noqa: F401

settings = get_settings()

IS_TEST = settings.APP_ENV.lower() == "test"

# ---------------------------------------------------------------------------
# Main application engine + session
# ---------------------------------------------------------------------------
engine = create_async_engine(
    settings.DB_URL,
    echo=False,
    future=True,
    # Tests open sessions from several event loops (TestClient portal,
    # pytest-asyncio), so never hand a pooled connection to a different loop.
    poolclass=NullPool if IS_TEST else None,
)


def _unicode_lower(value):
    return value.casefold() if isinstance(value, str) else value


if engine.dialect.name == "sqlite":

    @sa_event.listens_for(engine.sync_engine, "connect")
    def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
        # SQLite's built-in lower() only folds ASCII; ILIKE compiles to
        # lower(x) LIKE lower(y), so replace it with full Unicode case folding.
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async SQLAlchemy session.

    The session is automatically closed when the request is completed.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """
    Create any missing tables on application startup.

    Non-destructive; existing tables and rows are left alone.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ---------------------------------------------------------------------------
# TESTS ONLY: reset schema using a SYNC engine
# ---------------------------------------------------------------------------

def _build_sync_db_url(async_url: str) -> str:
    """
    Convert an async driver URL to its synchronous counterpart, e.g.
    'postgresql+asyncpg://...' -> 'postgresql://...' and
    'sqlite+aiosqlite:///...' -> 'sqlite:///...'.
    """
    for driver in ("+asyncpg", "+aiosqlite"):
        if driver in async_url:
            return async_url.replace(driver, "")
    return async_url


def reset_schema() -> None:
    """
    TEST-ONLY: drop and recreate every table with a synchronous engine.

    Runs outside any event loop so it can be used from plain pytest fixtures.
    """
    sync_engine = create_sync_engine(_build_sync_db_url(settings.DB_URL), future=True)

    with sync_engine.begin() as conn:
        Base.metadata.drop_all(bind=conn)
        Base.metadata.create_all(bind=conn)

    sync_engine.dispose()
