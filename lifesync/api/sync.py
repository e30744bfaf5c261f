"""Sync endpoint.

GET  /api/sync  - full snapshot of the caller's data (heals on the way)
POST /api/sync  - apply one command ``{commandType, payload}``

Error bodies are ``{"error": "..."}``: 401 for auth, 400 for a payload
without the fields its route needs, 500 for storage failures.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lifesync.auth.dependencies import get_current_user_id
from lifesync.config import Settings, get_settings
from lifesync.database import get_db_session, get_session_factory
from lifesync.services.sync_service import PayloadError, PersistenceError, SyncService
from lifesync.sync.commands import Command

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["sync"])


class SyncCommandRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    command_type: str
    payload: Any = None


def get_read_session_factory() -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


@router.get("/sync")
async def fetch_all(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    read_factory: async_sessionmaker[AsyncSession] = Depends(get_read_session_factory),
    settings: Settings = Depends(get_settings),
) -> Any:
    service = SyncService(db, read_session_factory=read_factory, settings=settings)
    try:
        return await service.fetch_all_and_heal(user_id)
    except PersistenceError as exc:
        log.error("sync.fetch_failed", user_id=user_id, error=str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@router.post("/sync")
async def apply_command(
    body: SyncCommandRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> Any:
    service = SyncService(db, settings=settings)
    command = Command(type=body.command_type, payload=body.payload)
    try:
        await service.apply_command(user_id, command)
    except PayloadError as exc:
        log.warning("sync.payload_rejected", user_id=user_id, command_type=command.type, error=str(exc))
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except PersistenceError as exc:
        log.error(
            "sync.command_failed",
            user_id=user_id,
            command_type=command.type,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(status_code=500, content={"error": "Sync failed"})
    return {"success": True}
