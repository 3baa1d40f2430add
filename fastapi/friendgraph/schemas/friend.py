from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class FriendRequestAction(BaseModel):

    status: Literal["accepted", "rejected"]


class MessageResponse(BaseModel):

    message: str


class FriendRequestSent(MessageResponse):

    request_id: str


class FriendRequestOut(BaseModel):

    id: str
    from_user: str
    status: Literal["pending", "accepted", "rejected"]
    created_at: Optional[datetime] = None


class FriendOut(BaseModel):

    id: str
    username: str
    email: str


class FriendRecommendation(FriendOut):

    mutual_friends_count: int


class FriendList(BaseModel):

    friends: List[FriendOut]


class FriendRequestList(BaseModel):

    requests: List[FriendRequestOut]
