from datetime import datetime
from typing import Literal, TypedDict

from bson import ObjectId


FriendRequestStatus = Literal["pending", "accepted", "rejected"]

FriendRequestDocument = TypedDict(
    "FriendRequestDocument",
    {
        "_id": ObjectId,
        "from": ObjectId,
        "status": FriendRequestStatus,
        "created_at": datetime,
    },
    total=False,
)
