from tsync.core.enums import FriendStatus

__all__ = [
    "ALLOWED_TRANSITIONS",
    "STATUSES_WITH_REQUEST",
    "can_transition",
]

STATUSES_WITH_REQUEST = frozenset(
    {FriendStatus.PENDING, FriendStatus.INCOMING_REQUEST}
)

ALLOWED_TRANSITIONS: dict[FriendStatus, frozenset[FriendStatus]] = {
    FriendStatus.NONE: frozenset(
        {FriendStatus.PENDING, FriendStatus.INCOMING_REQUEST}
    ),
    FriendStatus.PENDING: frozenset({FriendStatus.FRIENDS, FriendStatus.NONE}),
    FriendStatus.INCOMING_REQUEST: frozenset(
        {FriendStatus.FRIENDS, FriendStatus.NONE}
    ),
    FriendStatus.FRIENDS: frozenset({FriendStatus.NONE}),
}


def can_transition(current: FriendStatus, target: FriendStatus) -> bool:
    """
    Check whether a relationship may move from `current` to `target`.

    Staying in the same status is always allowed, so that redelivered
    events and repeated local updates are no-ops instead of errors.
    """
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]
