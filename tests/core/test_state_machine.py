import pytest

from tsync.core.enums import FriendStatus
from tsync.core.state_machine import can_transition


@pytest.mark.parametrize(
    "current, target",
    [
        (FriendStatus.NONE, FriendStatus.PENDING),
        (FriendStatus.NONE, FriendStatus.INCOMING_REQUEST),
        (FriendStatus.PENDING, FriendStatus.FRIENDS),
        (FriendStatus.INCOMING_REQUEST, FriendStatus.FRIENDS),
        (FriendStatus.PENDING, FriendStatus.NONE),
        (FriendStatus.INCOMING_REQUEST, FriendStatus.NONE),
        (FriendStatus.FRIENDS, FriendStatus.NONE),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        (FriendStatus.NONE, FriendStatus.FRIENDS),
        (FriendStatus.FRIENDS, FriendStatus.PENDING),
        (FriendStatus.FRIENDS, FriendStatus.INCOMING_REQUEST),
        (FriendStatus.PENDING, FriendStatus.INCOMING_REQUEST),
        (FriendStatus.INCOMING_REQUEST, FriendStatus.PENDING),
    ],
)
def test_forbidden_transitions(current, target):
    assert not can_transition(current, target)


@pytest.mark.parametrize("status", list(FriendStatus))
def test_staying_in_place_is_allowed(status):
    assert can_transition(status, status)
