from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tsync.core.enums import FriendRequestStatus

__all__ = [
    "UserSummary",
    "FriendRequest",
    "FriendLists",
]


class UserSummary(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id", min_length=1)
    name: str | None = None
    email: str | None = None
    profile_picture: str | None = Field(default=None, alias="profilePicture")


class FriendRequest(BaseModel):
    """
    A friend request record as returned by the backend.

    `sender` and `receiver` are populated user objects in list responses and
    plain ids in real-time payloads, so both shapes are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id", min_length=1)
    sender: UserSummary | str
    receiver: UserSummary | str
    status: FriendRequestStatus = FriendRequestStatus.PENDING
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @property
    def sender_id(self) -> str:
        return self.sender.id if isinstance(self.sender, UserSummary) else self.sender

    @property
    def receiver_id(self) -> str:
        return (
            self.receiver.id
            if isinstance(self.receiver, UserSummary)
            else self.receiver
        )

    @property
    def sender_name(self) -> str | None:
        return self.sender.name if isinstance(self.sender, UserSummary) else None

    @property
    def receiver_name(self) -> str | None:
        return self.receiver.name if isinstance(self.receiver, UserSummary) else None


class FriendLists(BaseModel):
    """The three backing lists the relationship status is derived from."""

    model_config = ConfigDict(frozen=True)

    friends: list[str] = Field(default_factory=list)
    received: list[FriendRequest] = Field(default_factory=list)
    sent: list[FriendRequest] = Field(default_factory=list)
