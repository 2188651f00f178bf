import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from logging import getLogger

from tsync.api.client import FriendsApiClient
from tsync.converters.relationship import to_relationship_state
from tsync.core.enums import FriendRequestStatus, FriendStatus
from tsync.crud import friendship as friendship_crud
from tsync.exceptions.base import ApiError, AppError
from tsync.exceptions.friends_exceptions import (
    FetchError,
    FriendRequestNotFoundLocally,
    RequestError,
)
from tsync.models.friendship import FriendLists, FriendRequest
from tsync.schemas.message import Message
from tsync.schemas.relationship import RelationshipState
from tsync.schemas.responses import FriendRequestCheck
from tsync.services.events import FriendEvent, apply_event

logger = getLogger(__name__)

# Snapshots overtaken by a local change are fetched again at most this often
REFRESH_ATTEMPTS = 3


def _active(requests: list[FriendRequest]) -> list[FriendRequest]:
    return [req for req in requests if req.status == FriendRequestStatus.PENDING]


class FriendStore:
    """
    Holds the friend lists of one authenticated session.

    Lists change only through the operations below: after a backend call
    succeeded, after a real-time event, or wholesale on `refresh()`. Each
    change replaces the `FriendLists` value in a single assignment, so readers
    never observe a half-applied mutation.

    Every replacement bumps a change counter. A refresh whose reads were
    overtaken by a local change discards its snapshot and reads again, so a
    slow refresh never undoes a change the backend already confirmed.
    """

    def __init__(self, *, api: FriendsApiClient):
        self._api = api
        self._lists = FriendLists()
        self._version = 0
        self._in_flight = 0
        self.error: str | None = None

    @property
    def lists(self) -> FriendLists:
        return self._lists.model_copy(deep=True)

    @property
    def friends(self) -> list[str]:
        return list(self._lists.friends)

    @property
    def received(self) -> list[FriendRequest]:
        return list(self._lists.received)

    @property
    def sent(self) -> list[FriendRequest]:
        return list(self._lists.sent)

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    def _replace(self, lists: FriendLists) -> None:
        self._lists = lists
        self._version += 1

    @asynccontextmanager
    async def _operation(self) -> AsyncIterator[None]:
        self._in_flight += 1
        try:
            yield
        except AppError as e:
            self.error = e.detail
            raise
        finally:
            self._in_flight -= 1

    def get_status(self, user_id: str) -> RelationshipState:
        return to_relationship_state(self._lists, user_id=user_id)

    def apply_event(self, event: FriendEvent) -> bool:
        """
        Apply a real-time event. Returns False when the event could not be
        applied without skipping a state, in which case a refresh is due.
        """
        lists, in_sync = apply_event(self._lists, event)
        self._replace(lists)
        return in_sync

    def clear(self) -> None:
        self._replace(FriendLists())
        self.error = None

    async def _fetch(self) -> FriendLists:
        try:
            friends, received, sent = await asyncio.gather(
                self._api.get_friends(),
                self._api.get_received_requests(),
                self._api.get_sent_requests(),
            )
        except ApiError as e:
            logger.warning(f"Error fetching friend data: {e.detail}")
            raise FetchError(e.detail) from e

        return FriendLists(
            friends=list(dict.fromkeys(friend.id for friend in friends)),
            received=_active(received),
            sent=_active(sent),
        )

    async def refresh(self) -> None:
        """
        Replace all three lists with the server's view.

        If the lists changed locally while the reads were in flight, the
        snapshot may predate that change and is fetched again. When every
        attempt is overtaken the current lists are kept.

        Raises:
            FetchError: If any of the three reads failed. The previous lists
                are kept.
        """
        async with self._operation():
            for _ in range(REFRESH_ATTEMPTS):
                started_at = self._version
                lists = await self._fetch()
                if self._version == started_at:
                    break
                logger.info("Friend lists changed during refresh, fetching again")
            else:
                logger.warning("Friend lists kept changing during refresh, keeping local lists")
                return

            self._replace(lists)
            self.error = None
            logger.debug(
                f"Refreshed friend data: {len(lists.friends)} friends, "
                f"{len(lists.received)} received, {len(lists.sent)} sent"
            )

    async def _resync(self) -> None:
        try:
            await self.refresh()
        except FetchError:
            logger.warning("Resync after a local discrepancy failed")

    async def check_request(self, user_id: str) -> FriendRequestCheck:
        """
        Ask the backend whether a friend request exists between the current
        user and `user_id`, in either direction.

        Raises:
            FetchError: If the lookup failed.
        """
        async with self._operation():
            try:
                return await self._api.check_friend_request(user_id)
            except ApiError as e:
                raise FetchError(e.detail) from e

    async def send_request(self, user_id: str, user_name: str | None = None) -> Message:
        """
        Send a friend request to `user_id`.

        Raises:
            RequestError: If the backend rejected the request.
        """
        async with self._operation():
            try:
                friend_request = await self._api.send_friend_request(user_id)
            except ApiError as e:
                raise RequestError(e.detail, status_code=e.status_code) from e
            self.error = None

            current = self.get_status(user_id)
            if current.status == FriendStatus.NONE:
                self._replace(
                    friendship_crud.add_sent_request(
                        lists=self._lists, friend_request=friend_request
                    )
                )
            elif current.request_id != friend_request.id:
                logger.info(
                    f"Sent request {friend_request.id} to {user_id} while status is {current.status.value}"
                )
                await self._resync()

        name = user_name or friend_request.receiver_name
        return Message(
            title="Friend Request Sent",
            message=f"Your friend request to {name} has been sent."
            if name
            else "Your friend request has been sent.",
        )

    async def accept_request(self, request_id: str, user_name: str | None = None) -> Message:
        """
        Accept a received friend request.

        Raises:
            RequestError: If the backend rejected the request.
        """
        async with self._operation():
            try:
                await self._api.accept_friend_request(request_id)
            except ApiError as e:
                raise RequestError(e.detail, status_code=e.status_code) from e
            self.error = None

            try:
                request = friendship_crud.get_received_request(
                    lists=self._lists, request_id=request_id
                )
            except FriendRequestNotFoundLocally as e:
                logger.info(f"{e.detail} Refreshing instead.")
                request = None
                await self._resync()
            else:
                self._replace(
                    friendship_crud.add_friend(
                        lists=self._lists, user_id=request.sender_id
                    )
                )

        name = user_name or (request.sender_name if request else None)
        return Message(
            title="Friend Request Accepted",
            message=f"You are now friends with {name}."
            if name
            else "Friend request accepted.",
        )

    async def reject_request(self, request_id: str, user_name: str | None = None) -> Message:
        """
        Reject a received friend request.

        Raises:
            RequestError: If the backend rejected the request.
        """
        async with self._operation():
            try:
                await self._api.reject_friend_request(request_id)
            except ApiError as e:
                raise RequestError(e.detail, status_code=e.status_code) from e
            self.error = None

            try:
                request = friendship_crud.get_received_request(
                    lists=self._lists, request_id=request_id
                )
            except FriendRequestNotFoundLocally as e:
                logger.info(f"{e.detail} Refreshing instead.")
                request = None
                await self._resync()
            else:
                self._replace(
                    friendship_crud.remove_received_request(
                        lists=self._lists, request_id=request_id
                    )
                )

        name = user_name or (request.sender_name if request else None)
        return Message(
            title="Friend Request Declined",
            message=f"Friend request from {name} has been declined."
            if name
            else "Friend request has been declined.",
        )

    async def cancel_request(self, request_id: str, user_name: str | None = None) -> Message:
        """
        Cancel a friend request the current user sent.

        Raises:
            RequestError: If the backend rejected the request.
        """
        async with self._operation():
            try:
                await self._api.cancel_friend_request(request_id)
            except ApiError as e:
                raise RequestError(e.detail, status_code=e.status_code) from e
            self.error = None

            try:
                request = friendship_crud.get_sent_request(
                    lists=self._lists, request_id=request_id
                )
            except FriendRequestNotFoundLocally as e:
                logger.info(f"{e.detail} Refreshing instead.")
                request = None
                await self._resync()
            else:
                self._replace(
                    friendship_crud.remove_sent_request(
                        lists=self._lists, request_id=request_id
                    )
                )

        name = user_name or (request.receiver_name if request else None)
        return Message(
            title="Request Cancelled",
            message=f"Your friend request to {name} has been cancelled."
            if name
            else "Friend request has been cancelled.",
        )

    async def remove_friend(self, user_id: str, user_name: str | None = None) -> Message:
        """
        Remove `user_id` from the friends list.

        Raises:
            RequestError: If the backend rejected the request.
        """
        async with self._operation():
            try:
                await self._api.remove_friend(user_id)
            except ApiError as e:
                raise RequestError(e.detail, status_code=e.status_code) from e
            self.error = None

            self._replace(
                friendship_crud.remove_friend(
                    lists=self._lists, user_id=user_id
                )
            )

        return Message(
            title="Friend Removed",
            message=f"{user_name} has been removed from your friends list."
            if user_name
            else "Friend has been removed from your friends list.",
        )
