from tsync.session import FriendSession
from tsync.services.friends import FriendStore
