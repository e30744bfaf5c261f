"""HTTP transport for the sync endpoint (httpx)."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from lifesync.sync.commands import Command

log = structlog.get_logger(__name__)

SYNC_PATH = "/api/sync"


class SyncTransportError(Exception):
    """Delivery failed. ``retryable`` is False for client errors (4xx) and bad responses."""

    def __init__(self, message: str, *, retryable: bool, status_code: int | None = None) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class SyncTransport:
    """Talks to ``/api/sync`` with a bearer session token.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``
        token: Session token sent as ``Authorization: Bearer``
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (``MockTransport`` in tests)
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def fetch_snapshot(self) -> dict[str, Any]:
        response = await self._send("GET", SYNC_PATH)
        try:
            snapshot = response.json()
        except ValueError as exc:
            raise SyncTransportError(
                f"GET {SYNC_PATH} returned a non-JSON body",
                retryable=False,
                status_code=response.status_code,
            ) from exc
        if not isinstance(snapshot, dict):
            raise SyncTransportError(
                f"GET {SYNC_PATH} returned {type(snapshot).__name__}, expected an object",
                retryable=False,
                status_code=response.status_code,
            )
        return snapshot

    async def push(self, command: Command, *, idempotency_key: str) -> None:
        await self._send(
            "POST",
            SYNC_PATH,
            json=command.to_wire(),
            headers={"Idempotency-Key": idempotency_key},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise SyncTransportError(
                f"HTTP {status} from {method} {url}",
                retryable=status >= 500 or status == 429,
                status_code=status,
            ) from exc
        except httpx.TransportError as exc:
            # Connection refused, timeouts, protocol errors
            raise SyncTransportError(f"{method} {url} failed: {exc}", retryable=True) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            # Bad body or redirect loop; resending will not help
            raise SyncTransportError(f"{method} {url} failed: {exc}", retryable=False) from exc
        return response
