import itertools

import pytest

from tsync.exceptions.friends_exceptions import MalformedEventError
from tsync.models.friendship import FriendLists
from tsync.services import events as events_services
from tsync.services.events import (
    FriendRemoved,
    RequestAccepted,
    RequestCanceled,
    RequestReceived,
    RequestRejected,
)


def _request_json(request_id: str, sender="u2", receiver="me") -> dict:
    return {
        "_id": request_id,
        "sender": sender,
        "receiver": receiver,
        "status": "pending",
        "createdAt": "2026-01-05T10:00:00.000Z",
    }


# --------------------------------------
# NORMALIZATION
# --------------------------------------


def test_normalize_flat_friend_request():
    payload = _request_json("r2", sender={"_id": "u2", "name": "Ada"})

    event = events_services.normalize_event("friend_request", payload)

    assert isinstance(event, RequestReceived)
    assert event.request.id == "r2"
    assert event.request.sender_id == "u2"
    assert event.request.sender_name == "Ada"


def test_normalize_envelope_friend_request():
    payload = {"event": "FRIEND_REQUEST_RECEIVED", "data": _request_json("r2")}

    event = events_services.normalize_event("friend_request_status_changed", payload)

    assert isinstance(event, RequestReceived)
    assert event.request.sender_id == "u2"


@pytest.mark.parametrize(
    "name, payload, expected",
    [
        (
            "friend_request_canceled",
            {"_id": "r1"},
            RequestCanceled(request_id="r1"),
        ),
        (
            "friend_rejected",
            {"_id": "r1"},
            RequestRejected(request_id="r1"),
        ),
        (
            "friend_accepted",
            {"_id": "r1", "user": {"_id": "u1", "name": "Ada"}},
            RequestAccepted(request_id="r1", counterpart_id="u1"),
        ),
        (
            "friend_removed",
            {"_id": "u1"},
            FriendRemoved(user_id="u1"),
        ),
    ],
)
def test_normalize_flat_events(name, payload, expected):
    assert events_services.normalize_event(name, payload) == expected


@pytest.mark.parametrize(
    "event_type, data, expected",
    [
        (
            "FRIEND_REQUEST_CANCELED",
            _request_json("r1"),
            RequestCanceled(request_id="r1"),
        ),
        (
            "FRIEND_REJECTED",
            _request_json("r1", sender="me", receiver="u1"),
            RequestRejected(request_id="r1"),
        ),
        (
            "FRIEND_ACCEPTED",
            _request_json("r1", sender="me", receiver="u1"),
            RequestAccepted(request_id="r1", counterpart_id="u1"),
        ),
        (
            "FRIEND_REMOVED",
            {"userId": "u1"},
            FriendRemoved(user_id="u1"),
        ),
    ],
)
def test_normalize_envelope_events(event_type, data, expected):
    payload = {"event": event_type, "data": data}

    event = events_services.normalize_event("friend_request_status_changed", payload)

    assert event == expected


@pytest.mark.parametrize(
    "name, payload",
    [
        ("meeting_invite", {"_id": "r1"}),
        ("friend_request_status_changed", {"data": {"_id": "r1"}}),
        ("friend_request_status_changed", {"event": "MEETING_UPDATE", "data": {}}),
        ("friend_request_status_changed", {"event": "FRIEND_REJECTED", "data": None}),
        ("friend_rejected", {}),
        ("friend_rejected", "r1"),
        ("friend_request", {"_id": "r1"}),
        ("friend_removed", {"name": "Ada"}),
    ],
)
def test_normalize_malformed(name, payload):
    with pytest.raises(MalformedEventError):
        events_services.normalize_event(name, payload)


# --------------------------------------
# APPLICATION
# --------------------------------------


def test_received_event_prepends(friend_request_factory):
    older = friend_request_factory(sender="u1")
    newer = friend_request_factory(sender="u2")
    lists = FriendLists(received=[older])

    result, in_sync = events_services.apply_event(lists, RequestReceived(request=newer))

    assert in_sync
    assert result.received == [newer, older]


def test_received_event_is_idempotent(friend_request_factory):
    request = friend_request_factory(sender="u2")
    event = RequestReceived(request=request)

    once, _ = events_services.apply_event(FriendLists(), event)
    twice, in_sync = events_services.apply_event(once, event)

    assert in_sync
    assert twice == once


def test_received_event_replaces_older_request_from_same_sender(friend_request_factory):
    stale = friend_request_factory(sender="u2")
    fresh = friend_request_factory(sender="u2")
    lists = FriendLists(received=[stale])

    result, in_sync = events_services.apply_event(lists, RequestReceived(request=fresh))

    assert in_sync
    assert result.received == [fresh]


def test_received_event_from_friend_is_out_of_sync(friend_request_factory):
    lists = FriendLists(friends=["u2"])

    result, in_sync = events_services.apply_event(
        lists, RequestReceived(request=friend_request_factory(sender="u2"))
    )

    assert not in_sync
    assert result == lists


def test_received_event_while_pending_is_out_of_sync(friend_request_factory):
    lists = FriendLists(sent=[friend_request_factory(sender="me", receiver="u2")])

    result, in_sync = events_services.apply_event(
        lists, RequestReceived(request=friend_request_factory(sender="u2"))
    )

    assert not in_sync
    assert result == lists


def test_accepted_event_uses_sent_request_receiver(friend_request_factory):
    sent = friend_request_factory(id="r1", sender="me", receiver="u1")
    lists = FriendLists(sent=[sent])

    result, in_sync = events_services.apply_event(lists, RequestAccepted(request_id="r1"))

    assert in_sync
    assert result.friends == ["u1"]
    assert result.sent == []


def test_accepted_event_is_idempotent(friend_request_factory):
    lists = FriendLists(sent=[friend_request_factory(id="r1", sender="me", receiver="u1")])
    event = RequestAccepted(request_id="r1", counterpart_id="u1")

    once, _ = events_services.apply_event(lists, event)
    twice, in_sync = events_services.apply_event(once, event)

    assert in_sync
    assert twice == once
    assert twice.friends == ["u1"]


def test_accepted_event_for_unknown_request_is_out_of_sync():
    lists = FriendLists()

    without_counterpart, first = events_services.apply_event(
        lists, RequestAccepted(request_id="r1")
    )
    with_counterpart, second = events_services.apply_event(
        lists, RequestAccepted(request_id="r1", counterpart_id="u1")
    )

    assert not first
    assert not second
    assert without_counterpart == lists
    assert with_counterpart == lists


@pytest.mark.parametrize(
    "event, lists_kwargs, list_name",
    [
        (RequestCanceled(request_id="r1"), "received", "received"),
        (RequestRejected(request_id="r1"), "sent", "sent"),
    ],
)
def test_request_removal_events_are_idempotent(
    friend_request_factory,
    event,
    lists_kwargs,
    list_name,
):
    lists = FriendLists(**{lists_kwargs: [friend_request_factory(id="r1")]})

    once, first = events_services.apply_event(lists, event)
    twice, second = events_services.apply_event(once, event)

    assert first and second
    assert getattr(once, list_name) == []
    assert twice == once


def test_friend_removed_event():
    lists = FriendLists(friends=["u1", "u2"])

    once, _ = events_services.apply_event(lists, FriendRemoved(user_id="u1"))
    twice, in_sync = events_services.apply_event(once, FriendRemoved(user_id="u1"))

    assert in_sync
    assert once.friends == ["u2"]
    assert twice == once


def _holds_disjointness(lists: FriendLists) -> bool:
    for user_id in {"u1", "u2", "u3"}:
        memberships = [
            user_id in lists.friends,
            any(req.sender_id == user_id for req in lists.received),
            any(req.receiver_id == user_id for req in lists.sent),
        ]
        if sum(memberships) > 1:
            return False
    return True


def test_event_sequences_keep_lists_disjoint(friend_request_factory):
    incoming = {
        user_id: friend_request_factory(id=f"in-{user_id}", sender=user_id, receiver="me")
        for user_id in ("u1", "u2", "u3")
    }
    outgoing = {
        user_id: friend_request_factory(id=f"out-{user_id}", sender="me", receiver=user_id)
        for user_id in ("u1", "u2", "u3")
    }
    events = [
        RequestReceived(request=incoming["u1"]),
        RequestReceived(request=incoming["u2"]),
        RequestCanceled(request_id="in-u1"),
        RequestAccepted(request_id="out-u2", counterpart_id="u2"),
        RequestAccepted(request_id="out-u3"),
        RequestRejected(request_id="out-u1"),
        FriendRemoved(user_id="u2"),
    ]
    start = FriendLists(sent=[outgoing["u1"], outgoing["u3"]])

    for sequence in itertools.permutations(events, 4):
        lists = start
        for event in sequence:
            lists, _ = events_services.apply_event(lists, event)
            assert _holds_disjointness(lists)


def test_accepted_after_local_accept_keeps_friend_once():
    lists = FriendLists(friends=["u1"])

    result, in_sync = events_services.apply_event(
        lists, RequestAccepted(request_id="r1", counterpart_id="u1")
    )

    assert in_sync
    assert result.friends == ["u1"]
    assert events_services.apply_event(result, FriendRemoved(user_id="u1"))[0].friends == []
