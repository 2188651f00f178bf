import asyncio

from tsync.core.config import settings
from tsync.logging_ import setup_logger
from tsync.services.friends import FriendStore
from tsync.session import FriendSession


def summarize(store: FriendStore) -> str:
    summary = (
        f"{len(store.friends)} friends, "
        f"{len(store.received)} incoming, "
        f"{len(store.sent)} outgoing"
    )
    if store.error:
        summary += f" (last error: {store.error})"
    return summary


async def watch(
    *,
    token: str,
    user_id: str,
    interval_seconds: int,
    rounds: int | None = None,
) -> None:
    """
    Keep a session open for `user_id` and log the friend lists periodically.

    The session's background job performs the resyncs; this loop only reports.
    Runs forever unless `rounds` is given.
    """
    logger = setup_logger("watch")

    async with FriendSession(
        token=token,
        user_id=user_id,
        refresh_interval_seconds=interval_seconds,
    ) as session:
        logger.info(f"Watching friends of {user_id}: {summarize(session.store)}")
        done = 0
        while rounds is None or done < rounds:
            await asyncio.sleep(interval_seconds)
            logger.info(summarize(session.store))
            done += 1


if __name__ == "__main__":
    if not settings.ACCESS_TOKEN or not settings.USER_ID:
        raise SystemExit("ACCESS_TOKEN and USER_ID must be set")

    asyncio.run(
        watch(
            token=settings.ACCESS_TOKEN,
            user_id=settings.USER_ID,
            interval_seconds=settings.BACKGROUND_REFRESH_SECONDS
            or settings.WATCH_INTERVAL_SECONDS,
        )
    )
