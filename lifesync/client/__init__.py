"""Client side of the sync protocol: local store, transport and dispatcher."""

from lifesync.client.dispatcher import SyncDispatcher
from lifesync.client.state import AppState
from lifesync.client.store import LocalStore, reduce
from lifesync.client.transport import SyncTransport, SyncTransportError

__all__ = [
    "AppState",
    "LocalStore",
    "SyncDispatcher",
    "SyncTransport",
    "SyncTransportError",
    "reduce",
]
