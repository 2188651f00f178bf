from logging import getLogger
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tsync.converters.relationship import to_relationship_state
from tsync.core.enums import FriendEventType, FriendStatus
from tsync.core.state_machine import can_transition
from tsync.crud import friendship as friendship_crud
from tsync.exceptions.friends_exceptions import MalformedEventError
from tsync.models.friendship import FriendLists, FriendRequest

logger = getLogger(__name__)

ENVELOPE_EVENT_NAME = "friend_request_status_changed"

FLAT_EVENT_NAMES: dict[str, FriendEventType] = {
    "friend_request": FriendEventType.FRIEND_REQUEST_RECEIVED,
    "friend_request_canceled": FriendEventType.FRIEND_REQUEST_CANCELED,
    "friend_accepted": FriendEventType.FRIEND_ACCEPTED,
    "friend_rejected": FriendEventType.FRIEND_REJECTED,
    "friend_removed": FriendEventType.FRIEND_REMOVED,
}


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class RequestReceived(_Event):
    kind: Literal["request_received"] = "request_received"
    request: FriendRequest


class RequestCanceled(_Event):
    kind: Literal["request_canceled"] = "request_canceled"
    request_id: str = Field(min_length=1)


class RequestAccepted(_Event):
    kind: Literal["request_accepted"] = "request_accepted"
    request_id: str = Field(min_length=1)
    # The user who accepted; absent when the payload only carries the request id
    counterpart_id: str | None = None


class RequestRejected(_Event):
    kind: Literal["request_rejected"] = "request_rejected"
    request_id: str = Field(min_length=1)


class FriendRemoved(_Event):
    kind: Literal["friend_removed"] = "friend_removed"
    user_id: str = Field(min_length=1)


FriendEvent = Annotated[
    RequestReceived | RequestCanceled | RequestAccepted | RequestRejected | FriendRemoved,
    Field(discriminator="kind"),
]


def _ref_id(value: Any) -> str | None:
    """Return the id of a user or request reference, populated or not."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        ref = value.get("_id") or value.get("id")
        return str(ref) if ref else None
    return None


def _to_event(event_type: FriendEventType, data: dict[str, Any]) -> FriendEvent:
    if event_type == FriendEventType.FRIEND_REQUEST_RECEIVED:
        return RequestReceived(request=FriendRequest.model_validate(data))

    request_id = _ref_id(data)
    if event_type == FriendEventType.FRIEND_REQUEST_CANCELED:
        return RequestCanceled.model_validate({"request_id": request_id})
    if event_type == FriendEventType.FRIEND_REJECTED:
        return RequestRejected.model_validate({"request_id": request_id})
    if event_type == FriendEventType.FRIEND_ACCEPTED:
        counterpart_id = _ref_id(data.get("user")) or _ref_id(data.get("receiver"))
        return RequestAccepted.model_validate(
            {"request_id": request_id, "counterpart_id": counterpart_id}
        )

    user_id = _ref_id(data.get("user")) or data.get("userId") or request_id
    return FriendRemoved.model_validate({"user_id": user_id})


def normalize_event(name: str, payload: Any) -> FriendEvent:
    """
    Convert a real-time payload into a `FriendEvent`.

    Two wire conventions are accepted: a flat event name carrying the data
    directly (`friend_accepted`, ...), and the `friend_request_status_changed`
    envelope `{event: FRIEND_ACCEPTED, data: {...}}`.

    Raises:
        MalformedEventError: If the name is unknown or the payload does not fit.
    """
    if name == ENVELOPE_EVENT_NAME:
        if not isinstance(payload, dict) or "event" not in payload:
            raise MalformedEventError(name, "missing envelope")
        try:
            event_type = FriendEventType(payload["event"])
        except ValueError as e:
            raise MalformedEventError(name, f"unknown event type {payload['event']!r}") from e
        data = payload.get("data")
    elif name in FLAT_EVENT_NAMES:
        event_type = FLAT_EVENT_NAMES[name]
        data = payload
    else:
        raise MalformedEventError(name, "unknown event name")

    if not isinstance(data, dict):
        raise MalformedEventError(name, "payload is not an object")

    try:
        return _to_event(event_type, data)
    except ValidationError as e:
        raise MalformedEventError(name, str(e)) from e


def apply_event(lists: FriendLists, event: FriendEvent) -> tuple[FriendLists, bool]:
    """
    Apply a real-time event to the friend lists.

    Every effect is idempotent: removing an absent id or adding a present one
    leaves the lists unchanged. When the event would make a relationship skip
    a state, the lists are returned untouched and the second element is False,
    meaning the local view is out of sync and needs a full refresh.

    Returns:
        tuple[FriendLists, bool]: The updated lists, and whether they are in sync.
    """
    if isinstance(event, RequestReceived):
        request = event.request
        if friendship_crud.find_received_request(lists=lists, request_id=request.id):
            return lists, True
        current = to_relationship_state(lists, user_id=request.sender_id).status
        if not can_transition(current, FriendStatus.INCOMING_REQUEST):
            logger.info(
                f"Ignoring request {request.id} from {request.sender_id}: status is {current.value}"
            )
            return lists, False
        # A sender has at most one pending request towards us
        lists = lists.model_copy(
            update={
                "received": [
                    req for req in lists.received if req.sender_id != request.sender_id
                ]
            }
        )
        return friendship_crud.prepend_received_request(
            lists=lists, friend_request=request
        ), True

    if isinstance(event, RequestCanceled):
        return friendship_crud.remove_received_request(
            lists=lists, request_id=event.request_id
        ), True

    if isinstance(event, RequestRejected):
        return friendship_crud.remove_sent_request(
            lists=lists, request_id=event.request_id
        ), True

    if isinstance(event, FriendRemoved):
        return friendship_crud.remove_friend(lists=lists, user_id=event.user_id), True

    request = friendship_crud.find_sent_request(lists=lists, request_id=event.request_id)
    counterpart_id = event.counterpart_id or (request.receiver_id if request else None)
    if counterpart_id is None:
        logger.info(f"Acceptance of unknown request {event.request_id}")
        return lists, False

    current = to_relationship_state(lists, user_id=counterpart_id).status
    if not can_transition(current, FriendStatus.FRIENDS):
        logger.info(
            f"Ignoring acceptance of {event.request_id} by {counterpart_id}: status is {current.value}"
        )
        return lists, False

    lists = friendship_crud.remove_sent_request(lists=lists, request_id=event.request_id)
    return friendship_crud.add_friend(lists=lists, user_id=counterpart_id), True
