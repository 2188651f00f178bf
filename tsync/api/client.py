from logging import getLogger
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from tsync.core.config import settings
from tsync.exceptions.base import ApiError
from tsync.models.friendship import FriendRequest, UserSummary
from tsync.schemas.responses import (
    CreateFriendRequestResponse,
    FriendRequestCheck,
    FriendRequestsResponse,
    FriendsResponse,
)

logger = getLogger(__name__)

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


def _error_message(response: httpx.Response) -> str:
    fallback = f"Request failed with status {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return fallback


class FriendsApiClient:
    """
    Thin async wrapper around the friends endpoints of the TSync backend.

    Every call carries the session's bearer token. Failures of any kind are
    raised as `ApiError` carrying the server-supplied message when there is one.
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str | None = None,
        timeout: float | None = None,
        use_pending_endpoints: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.use_pending_endpoints = (
            settings.USE_PENDING_ENDPOINTS
            if use_pending_endpoints is None
            else use_pending_endpoints
        )
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=timeout or settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "FriendsApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.warning(f"{method} {path} failed ({e.response.status_code}): {message}")
            raise ApiError(message, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed. Error: {e}")
            raise ApiError(f"Could not reach the server: {e}") from e

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as e:
            raise ApiError(f"Unexpected response from {path}") from e
        if not isinstance(payload, dict):
            raise ApiError(f"Unexpected response from {path}")
        return payload

    @staticmethod
    def _parse(
        model: type[ResponseModel], payload: dict[str, Any], path: str
    ) -> ResponseModel:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Malformed payload from {path}: {e}")
            raise ApiError(f"Unexpected response from {path}") from e

    async def get_friends(self) -> list[UserSummary]:
        path = "/friends"
        payload = await self._request("GET", path)
        return self._parse(FriendsResponse, payload, path).friends

    async def get_received_requests(self) -> list[FriendRequest]:
        path = "/friends/requests/received"
        if self.use_pending_endpoints:
            path += "/pending"
        payload = await self._request("GET", path)
        return self._parse(FriendRequestsResponse, payload, path).requests

    async def get_sent_requests(self) -> list[FriendRequest]:
        path = "/friends/requests/sent"
        if self.use_pending_endpoints:
            path += "/pending"
        payload = await self._request("GET", path)
        return self._parse(FriendRequestsResponse, payload, path).requests

    async def check_friend_request(self, user_id: str) -> FriendRequestCheck:
        path = f"/friends/requests/{user_id}"
        payload = await self._request("GET", path)
        return self._parse(FriendRequestCheck, payload, path)

    async def send_friend_request(self, user_id: str) -> FriendRequest:
        path = f"/friends/requests/{user_id}"
        payload = await self._request("POST", path)
        return self._parse(CreateFriendRequestResponse, payload, path).friend_request

    async def accept_friend_request(self, request_id: str) -> None:
        await self._request("PUT", f"/friends/requests/{request_id}/accept")

    async def reject_friend_request(self, request_id: str) -> None:
        await self._request("PUT", f"/friends/requests/{request_id}/reject")

    async def cancel_friend_request(self, request_id: str) -> None:
        await self._request("DELETE", f"/friends/requests/{request_id}")

    async def remove_friend(self, friend_id: str) -> None:
        await self._request("DELETE", f"/friends/{friend_id}")
