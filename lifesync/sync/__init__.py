"""Command vocabulary shared by the client store, dispatcher and server."""

from lifesync.sync.commands import (
    LOCAL_ONLY_COMMANDS,
    NON_IDEMPOTENT_COMMANDS,
    Command,
    CommandType,
)

__all__ = ["Command", "CommandType", "LOCAL_ONLY_COMMANDS", "NON_IDEMPOTENT_COMMANDS"]
