from tsync.exceptions.friends_exceptions import FriendRequestNotFoundLocally
from tsync.models.friendship import FriendLists, FriendRequest


def is_friend(
    *,
    lists: FriendLists,
    user_id: str,
) -> bool:
    """
    Check if a user is in the friends list.

    Parameters:
        lists (FriendLists): The current friend lists.
        user_id (str): The ID of the counterpart.
    Returns:
        bool: True if the users are friends, False otherwise.
    """
    return user_id in lists.friends


def find_received_request(
    *,
    lists: FriendLists,
    request_id: str,
) -> FriendRequest | None:
    return next((req for req in lists.received if req.id == request_id), None)


def find_sent_request(
    *,
    lists: FriendLists,
    request_id: str,
) -> FriendRequest | None:
    return next((req for req in lists.sent if req.id == request_id), None)


def get_received_request(
    *,
    lists: FriendLists,
    request_id: str,
) -> FriendRequest:
    """
    Get a received friend request by its id.

    Parameters:
        lists (FriendLists): The current friend lists.
        request_id (str): The ID of the friend request.
    Returns:
        FriendRequest: The matching received request.
    Raises:
        FriendRequestNotFoundLocally: If no received request has this id.
    """
    request = find_received_request(lists=lists, request_id=request_id)
    if request is None:
        raise FriendRequestNotFoundLocally(request_id)
    return request


def get_sent_request(
    *,
    lists: FriendLists,
    request_id: str,
) -> FriendRequest:
    """
    Get a sent friend request by its id.

    Raises:
        FriendRequestNotFoundLocally: If no sent request has this id.
    """
    request = find_sent_request(lists=lists, request_id=request_id)
    if request is None:
        raise FriendRequestNotFoundLocally(request_id)
    return request


def add_friend(
    *,
    lists: FriendLists,
    user_id: str,
) -> FriendLists:
    """
    Add a user to the friends list if not already there.
    Any request record between the two users is dropped from both request
    lists, since a friendship supersedes it.

    Parameters:
        lists (FriendLists): The current friend lists.
        user_id (str): The ID of the new friend.
    Returns:
        FriendLists: The updated lists.
    """
    friends = lists.friends if user_id in lists.friends else [*lists.friends, user_id]
    return lists.model_copy(
        update={
            "friends": friends,
            "received": [req for req in lists.received if req.sender_id != user_id],
            "sent": [req for req in lists.sent if req.receiver_id != user_id],
        }
    )


def remove_friend(
    *,
    lists: FriendLists,
    user_id: str,
) -> FriendLists:
    """
    Remove a user from the friends list. A no-op if the user is not a friend.
    """
    return lists.model_copy(
        update={"friends": [friend for friend in lists.friends if friend != user_id]}
    )


def add_sent_request(
    *,
    lists: FriendLists,
    friend_request: FriendRequest,
) -> FriendLists:
    """
    Append a request to the sent list unless a request with the same id is
    already present.

    Parameters:
        lists (FriendLists): The current friend lists.
        friend_request (FriendRequest): The request that was sent.
    Returns:
        FriendLists: The updated lists.
    """
    if find_sent_request(lists=lists, request_id=friend_request.id) is not None:
        return lists
    return lists.model_copy(update={"sent": [*lists.sent, friend_request]})


def prepend_received_request(
    *,
    lists: FriendLists,
    friend_request: FriendRequest,
) -> FriendLists:
    """
    Put a request at the front of the received list unless a request with
    the same id is already present.
    """
    if find_received_request(lists=lists, request_id=friend_request.id) is not None:
        return lists
    return lists.model_copy(update={"received": [friend_request, *lists.received]})


def remove_received_request(
    *,
    lists: FriendLists,
    request_id: str,
) -> FriendLists:
    """
    Remove a request from the received list. A no-op if the id is absent.
    """
    return lists.model_copy(
        update={"received": [req for req in lists.received if req.id != request_id]}
    )


def remove_sent_request(
    *,
    lists: FriendLists,
    request_id: str,
) -> FriendLists:
    """
    Remove a request from the sent list. A no-op if the id is absent.
    """
    return lists.model_copy(
        update={"sent": [req for req in lists.sent if req.id != request_id]}
    )
