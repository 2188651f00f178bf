from enum import Enum, unique


@unique
class FriendStatus(str, Enum):
    NONE = "none"
    PENDING = "pending_sent"
    INCOMING_REQUEST = "pending_received"
    FRIENDS = "friends"


@unique
class FriendRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@unique
class FriendEventType(str, Enum):
    FRIEND_REQUEST_RECEIVED = "FRIEND_REQUEST_RECEIVED"
    FRIEND_REQUEST_CANCELED = "FRIEND_REQUEST_CANCELED"
    FRIEND_ACCEPTED = "FRIEND_ACCEPTED"
    FRIEND_REJECTED = "FRIEND_REJECTED"
    FRIEND_REMOVED = "FRIEND_REMOVED"
