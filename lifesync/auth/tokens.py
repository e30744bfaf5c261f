"""Session token verification.

Session issuance lives elsewhere; this side only needs "token -> user id".
Tokens are HS256 JWTs carrying a ``userId`` claim.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError

from lifesync.config import Settings


class AuthError(Exception):
    """Raised when a request carries no usable session token.

    ``message`` is safe to return to the client.
    """

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
        self.message = message


def verify_token(token: str, settings: Settings) -> str:
    """Validate a session token and return the user id it names."""
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": True},
        )
    except InvalidTokenError as exc:
        raise AuthError("Invalid Token") from exc

    user_id = claims.get("userId")
    if not user_id or not isinstance(user_id, str):
        raise AuthError("Invalid Token")
    return user_id


def create_session_token(
    user_id: str,
    *,
    settings: Settings,
    expires_in: int = 3600,
) -> str:
    """Create a session token for scripts and tests.

    Never call this from request handling code.
    """
    now = int(datetime.now(UTC).timestamp())
    payload = {"userId": user_id, "iat": now, "exp": now + expires_in}
    return jwt.encode(
        payload,
        settings.jwt_secret.get_secret_value(),
        algorithm=settings.jwt_algorithm,
    )
