import asyncio
from logging import getLogger
from typing import Any

from apscheduler.schedulers.asyncio import (  # type: ignore[import-untyped]
    AsyncIOScheduler,
)
from apscheduler.triggers.interval import IntervalTrigger  # type: ignore[import-untyped]

from tsync.api.client import FriendsApiClient
from tsync.core.config import settings
from tsync.exceptions.friends_exceptions import FetchError
from tsync.realtime.socket import FriendEventListener, SocketClient
from tsync.services.friends import FriendStore

logger = getLogger(__name__)

RESYNC_JOB_ID = "friend_resync"


class FriendSession:
    """
    Owns the friend state of one logged-in user.

    Create it at login, `start()` it to load the lists and attach the
    real-time listener, and `close()` it at logout. UI code receives the
    session (or its `store`) by reference.
    """

    def __init__(
        self,
        *,
        token: str,
        user_id: str,
        socket: SocketClient | None = None,
        api: FriendsApiClient | None = None,
        refresh_interval_seconds: int | None = None,
    ):
        self.user_id = user_id
        self._owns_api = api is None
        self.api = api or FriendsApiClient(token=token)
        self.store = FriendStore(api=self.api)
        self.listener = FriendEventListener(self.store, on_out_of_sync=self.resync)
        self._socket = socket
        self._refresh_interval = (
            settings.BACKGROUND_REFRESH_SECONDS
            if refresh_interval_seconds is None
            else refresh_interval_seconds
        )
        self._scheduler: AsyncIOScheduler | None = None

    async def __aenter__(self) -> "FriendSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def start(self) -> None:
        if self._socket is not None:
            self.listener.bind(self._socket)

        await self.resync()

        if self._refresh_interval > 0:
            self._scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop())
            self._scheduler.add_job(
                func=self.resync,
                trigger=IntervalTrigger(seconds=self._refresh_interval),
                id=RESYNC_JOB_ID,
                max_instances=1,
                coalesce=True,
            )
            self._scheduler.start()
            logger.info(f"Background friend resync every {self._refresh_interval}s")

    async def resync(self) -> None:
        """Full refresh whose failure is reported through `store.error` only."""
        try:
            await self.store.refresh()
        except FetchError as e:
            logger.warning(f"Friend data refresh failed for user {self.user_id}: {e.detail}")

    async def close(self) -> None:
        self.listener.closed = True
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
        self.store.clear()
        if self._owns_api:
            await self.api.aclose()
        logger.info(f"Closed friend session for user {self.user_id}")
