from httpx import codes

from .base import AppError


class FetchError(AppError):
    status_code = codes.SERVICE_UNAVAILABLE

    def __init__(self, detail: str | None = None):
        super().__init__(detail or "Failed to fetch friend data")


class RequestError(AppError):
    status_code = codes.BAD_REQUEST

    def __init__(self, detail: str, status_code: int | None = None):
        if status_code is not None:
            self.status_code = status_code
        super().__init__(detail)


class FriendRequestNotFoundLocally(AppError):
    status_code = codes.NOT_FOUND

    def __init__(self, request_id: str):
        self.request_id = request_id
        detail = f"Friend request {request_id} is not present in the local friend lists."
        super().__init__(detail)


class MalformedEventError(AppError):
    status_code = codes.UNPROCESSABLE_ENTITY

    def __init__(self, event_name: str, reason: str):
        self.event_name = event_name
        detail = f"Cannot handle real-time event {event_name!r}: {reason}."
        super().__init__(detail)
