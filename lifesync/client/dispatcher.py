"""
Sync dispatcher.

Every command goes to the local store first, so the UI reflects it
immediately. Commands that change persisted data are then queued for the
server and delivered by a single background task in dispatch order.

Queue semantics:
- entries are keyed by ``<commandType>:<entity id>``; dispatching a
  replace-style command whose key is still pending drops the older entry
  and appends the new one, so the server only sees the latest value
- toggles are not idempotent: each gets a unique key and one attempt
- transport failures are retried by tenacity with exponential backoff
  (``backoff * 2**attempt``) up to ``max_attempts``; 4xx is final
- a command that finally fails is dropped and reported once through the
  notifier; the optimistic local change stays until the next full load
"""

from __future__ import annotations

import asyncio
import itertools
import uuid
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from lifesync.client.store import LocalStore
from lifesync.client.transport import SyncTransport, SyncTransportError
from lifesync.config import Settings, get_settings
from lifesync.sync.commands import Command, CommandType

log = structlog.get_logger(__name__)

SYNC_FAILED_MESSAGE = "Changes could not be saved to the server"
LOAD_FAILED_MESSAGE = "Could not load your data from the server"

Notifier = Callable[[str], None]
Sleep = Callable[[float], Awaitable[None]]


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, SyncTransportError) and exc.retryable


class SyncDispatcher:
    def __init__(
        self,
        store: LocalStore,
        transport: SyncTransport,
        *,
        notify: Notifier | None = None,
        max_attempts: int = 5,
        backoff_seconds: float = 0.5,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._store = store
        self._transport = transport
        self._notify = notify or self._notify_in_store
        self._max_attempts = max_attempts
        self._backoff = backoff_seconds
        self._sleep = sleep
        self._queue: OrderedDict[str, Command] = OrderedDict()
        self._seq = itertools.count(1)
        self._drain_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls,
        store: LocalStore,
        token: str,
        settings: Settings | None = None,
        **kwargs,
    ) -> SyncDispatcher:
        cfg = settings or get_settings()
        transport = SyncTransport(
            cfg.sync_base_url,
            token,
            timeout=cfg.sync_request_timeout_seconds,
        )
        return cls(
            store,
            transport,
            max_attempts=cfg.sync_max_attempts,
            backoff_seconds=cfg.sync_retry_backoff_seconds,
            **kwargs,
        )

    @property
    def pending(self) -> list[str]:
        """Idempotency keys waiting for delivery, in delivery order."""
        return list(self._queue)

    def dispatch(self, command: Command) -> None:
        """Apply locally, then queue for the server.

        Must be called from inside a running event loop when the command is
        not local-only.
        """
        self._store.apply(command)
        if command.is_local_only:
            return

        key = self._key_for(command)
        if key in self._queue:
            del self._queue[key]
            log.debug("dispatcher.command_coalesced", key=key)
        self._queue[key] = command

        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    async def load(self) -> bool:
        """Fetch the server snapshot into the store. Returns False on failure."""
        try:
            snapshot = await self._transport.fetch_snapshot()
        except SyncTransportError as exc:
            log.warning("dispatcher.load_failed", error=str(exc), status_code=exc.status_code)
            self._notify(LOAD_FAILED_MESSAGE)
            self._store.apply(Command(CommandType.SET_LOADING, False))
            return False
        self._store.apply(Command(CommandType.INIT_DATA, snapshot))
        self._store.apply(Command(CommandType.SET_LOADING, False))
        log.info("dispatcher.loaded", collections=len(snapshot))
        return True

    async def flush(self) -> None:
        """Wait until every queued command has been delivered or dropped."""
        while self._drain_task is not None and not self._drain_task.done():
            await self._drain_task

    async def close(self) -> None:
        await self.flush()
        await self._transport.aclose()

    def _key_for(self, command: Command) -> str:
        entity = command.entity_key()
        if entity is None or not command.is_idempotent:
            suffix = f"{entity}:{next(self._seq)}" if entity else str(next(self._seq))
            return f"{command.type}:{suffix}"
        return f"{command.type}:{entity}"

    async def _drain(self) -> None:
        while self._queue:
            key, command = self._queue.popitem(last=False)
            await self._deliver(key, command)

    async def _deliver(self, key: str, command: Command) -> None:
        retrying = AsyncRetrying(
            sleep=self._sleep,
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._max_attempts if command.is_idempotent else 1),
            wait=wait_exponential(multiplier=self._backoff),
            before_sleep=lambda state: log.info(
                "dispatcher.retry_scheduled",
                key=key,
                attempt=state.attempt_number,
                delay=state.next_action.sleep,
            ),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._transport.push(command, idempotency_key=key)
        except SyncTransportError as exc:
            log.warning(
                "dispatcher.command_dropped",
                key=key,
                attempts=retrying.statistics.get("attempt_number"),
                status_code=exc.status_code,
                error=str(exc),
            )
            self._notify(SYNC_FAILED_MESSAGE)
            return
        log.debug(
            "dispatcher.command_delivered",
            key=key,
            attempts=retrying.statistics.get("attempt_number"),
        )

    def _notify_in_store(self, message: str) -> None:
        self._store.apply(
            Command(
                CommandType.ADD_NOTIFICATION,
                {
                    "id": str(uuid.uuid4()),
                    "title": "Sync",
                    "message": message,
                    "date": datetime.now(UTC).isoformat(),
                    "read": False,
                },
            )
        )
