from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import Any, Protocol

from tsync.exceptions.friends_exceptions import MalformedEventError
from tsync.services.events import (
    ENVELOPE_EVENT_NAME,
    FLAT_EVENT_NAMES,
    RequestAccepted,
    RequestReceived,
    normalize_event,
)
from tsync.services.friends import FriendStore

logger = getLogger(__name__)

EVENT_NAMES = (*FLAT_EVENT_NAMES, ENVELOPE_EVENT_NAME)


class SocketClient(Protocol):
    """The part of a Socket.IO client used here, e.g. `socketio.AsyncClient`."""

    def on(self, event: str, handler: Callable[..., Any]) -> Any: ...


class FriendEventListener:
    """
    Feeds friend events from a real-time connection into a `FriendStore`.

    Events that leave the store out of sync trigger `on_out_of_sync`, which
    the session wires to a full refresh. The listener itself never calls the
    backend.
    """

    def __init__(
        self,
        store: FriendStore,
        *,
        on_out_of_sync: Callable[[], Awaitable[None]] | None = None,
    ):
        self.store = store
        self.on_out_of_sync = on_out_of_sync
        self.unread_count = 0
        self.closed = False

    def reset_unread(self) -> None:
        self.unread_count = 0

    async def handle(self, name: str, payload: Any) -> None:
        if self.closed:
            return
        try:
            event = normalize_event(name, payload)
        except MalformedEventError as e:
            logger.warning(e.detail)
            return

        logger.debug(f"Socket: {name} -> {event.kind}")
        in_sync = self.store.apply_event(event)
        if isinstance(event, RequestReceived | RequestAccepted):
            self.unread_count += 1

        if not in_sync and self.on_out_of_sync is not None:
            await self.on_out_of_sync()

    def _handler(self, name: str) -> Callable[..., Awaitable[None]]:
        async def handler(data: Any = None, *_: Any) -> None:
            await self.handle(name, data)

        return handler

    def bind(self, client: SocketClient) -> None:
        for name in EVENT_NAMES:
            client.on(name, self._handler(name))
        logger.info("Set up socket listeners for friend events")
