from pydantic import BaseModel, ConfigDict, Field

from tsync.core.enums import FriendRequestStatus
from tsync.models.friendship import FriendRequest, UserSummary

__all__ = [
    "FriendsResponse",
    "FriendRequestsResponse",
    "CreateFriendRequestResponse",
    "FriendRequestCheck",
]


class FriendsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    friends: list[UserSummary] = Field(default_factory=list)


class FriendRequestsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    requests: list[FriendRequest] = Field(default_factory=list)


# The create endpoint answers {success, message, friendRequest}
class CreateFriendRequestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str | None = None
    friend_request: FriendRequest = Field(alias="friendRequest")


class FriendRequestCheck(BaseModel):
    model_config = ConfigDict(extra="ignore")

    exists: bool
    status: FriendRequestStatus | None = None
    sender: str | None = None
    receiver: str | None = None
