from .base import ApiError, AppError
from .friends_exceptions import (
    FetchError,
    FriendRequestNotFoundLocally,
    MalformedEventError,
    RequestError,
)
