from tsync.core.enums import FriendStatus
from tsync.crud import friendship as friendship_crud
from tsync.models.friendship import FriendLists
from tsync.schemas.relationship import RelationshipState


def to_relationship_state(
    lists: FriendLists,
    *,
    user_id: str,
) -> RelationshipState:
    """
    Derives the relationship status between the current user and `user_id`
    from the three friend lists.

    Friends take priority over any stray request record, then incoming
    requests, then outgoing ones, so the result is deterministic even if the
    lists ever overlap.

    Parameters:
        lists (FriendLists): The current friend lists.
        user_id (str): The ID of the counterpart.
    Returns:
        RelationshipState: The derived status, with the request id when a
        request is outstanding.
    """
    if not user_id:
        return RelationshipState(status=FriendStatus.NONE)

    if friendship_crud.is_friend(lists=lists, user_id=user_id):
        return RelationshipState(status=FriendStatus.FRIENDS)

    received = next(
        (req for req in lists.received if req.sender_id == user_id), None
    )
    if received is not None:
        return RelationshipState(
            status=FriendStatus.INCOMING_REQUEST,
            request_id=received.id,
        )

    sent = next((req for req in lists.sent if req.receiver_id == user_id), None)
    if sent is not None:
        return RelationshipState(status=FriendStatus.PENDING, request_id=sent.id)

    return RelationshipState(status=FriendStatus.NONE)
