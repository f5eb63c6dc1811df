# app/main.py
from fastapi import FastAPI

from app.api.routes import events, health, internal
from app.core.config import get_settings
from app.core.exceptions import register_exception_handlers
from app.core.logging_config import configure_logging
from app.db.session import init_db


def create_app() -> FastAPI:
    """
    Application factory for the Workspace Meetings service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Workspace-scoped meeting scheduling: create, list, fetch, reschedule\n"
            "and cancel meetings, gated by the caller's workspace role."
        ),
        version="0.1.0",
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(events.router)
    app.include_router(internal.router)

    @app.on_event("startup")
    async def on_startup() -> None:  # pragma: no cover
        await init_db()

    return app


app = create_app()
