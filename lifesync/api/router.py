"""Router aggregation.

public_router - no auth (health probes)
api_router    - session-authenticated endpoints
"""

from fastapi import APIRouter

from lifesync.api import health, sync

public_router = APIRouter()
public_router.include_router(health.router)

api_router = APIRouter()
api_router.include_router(sync.router)
