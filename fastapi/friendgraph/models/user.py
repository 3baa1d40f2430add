from datetime import datetime
from typing import List, TypedDict

from bson import ObjectId

from friendgraph.models.friend_request import FriendRequestDocument


class UserDocument(TypedDict, total=False):

    _id: str  # stringified by UserRepository
    username: str
    email: str
    hashed_password: str
    # ids of accepted friends; kept symmetric with each friend's own list
    friends: List[ObjectId]
    # requests received by this user
    friend_requests: List[FriendRequestDocument]
    created_at: datetime
