"""FastAPI dependencies for authentication.

The session token is read from the ``access_token`` cookie first, then from
an ``Authorization: Bearer`` header. Failures raise ``AuthError``; the app
turns that into a 401 with an ``{"error": ...}`` body.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Request

from lifesync.auth.tokens import AuthError, verify_token
from lifesync.config import Settings, get_settings
from lifesync.telemetry.logging import bind_user_context

log = structlog.get_logger(__name__)


def _extract_token(request: Request, settings: Settings) -> str | None:
    token = request.cookies.get(settings.access_token_cookie)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.removeprefix("Bearer ").strip() or None
    return None


async def get_current_user_id(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> str:
    """Resolve the calling user's id. Raises AuthError (401)."""
    token = _extract_token(request, settings)
    if token is None:
        raise AuthError("Unauthorized")
    try:
        user_id = verify_token(token, settings)
    except AuthError:
        log.info("auth.token_rejected", path=request.url.path)
        raise
    bind_user_context(user_id=user_id)
    return user_id
