"""Telemetry package: structured logging with request correlation."""

from __future__ import annotations

from lifesync.telemetry.logging import (
    RequestIdMiddleware,
    bind_user_context,
    clear_context,
    configure_logging,
)

__all__ = [
    "RequestIdMiddleware",
    "bind_user_context",
    "clear_context",
    "configure_logging",
]
