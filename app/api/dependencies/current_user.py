# app/api/dependencies/current_user.py
from typing import Optional

from fastapi import Header

from app.core.exceptions import Unauthorized


async def get_current_user_id(
    user_id: Optional[str] = Header(
        default=None,
        alias="X-User-Id",
        description="Authenticated caller id, set by the upstream auth gateway.",
    ),
) -> str:
    """
    Resolve the authenticated caller.

    Session handling lives in the gateway in front of this service; by the
    time a request arrives here the caller id is a trusted header.
    """
    if user_id is None or not user_id.strip():
        raise Unauthorized()
    return user_id.strip()
