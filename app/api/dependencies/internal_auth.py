# app/api/dependencies/internal_auth.py
from http import HTTPStatus
from typing import Optional

from fastapi import Header

from app.core.config import get_settings
from app.core.exceptions import AppError, Unauthorized


async def verify_internal_api_key(
    internal_api_key: Optional[str] = Header(
        default=None,
        alias="X-Internal-Api-Key",
        description="Internal API key required for /internal endpoints in non-local environments.",
    ),
) -> None:
    """
    Dependency to protect the /internal provisioning endpoints.

    Rules
    -----
    - APP_ENV in ("local", "test"):
        - If INTERNAL_API_KEY is not set -> no auth enforced.
        - If INTERNAL_API_KEY is set      -> header must match the configured key.
    - Any other APP_ENV (dev/stage/prod):
        - INTERNAL_API_KEY must be set, otherwise 500 (misconfiguration).
        - Header must be present and match INTERNAL_API_KEY, otherwise 401.
    """
    settings = get_settings()
    env = (settings.APP_ENV or "local").lower()
    expected = getattr(settings, "INTERNAL_API_KEY", None)

    if env in ("local", "test") and not expected:
        return

    if not expected:
        raise AppError(
            "INTERNAL_API_KEY not configured for this environment.",
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        )

    if not internal_api_key or internal_api_key != expected:
        raise Unauthorized("Invalid or missing internal API key.")
