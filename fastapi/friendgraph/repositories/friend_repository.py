from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from friendgraph.models.friend_request import FriendRequestDocument, FriendRequestStatus


def build_recommendation_pipeline(user_id: ObjectId, friend_ids: Sequence[ObjectId], limit: int) -> List[Dict[str, Any]]:
    """Friends-of-friends ranking.

    Candidates are every user except ``user_id`` and its friends. For each
    candidate the lookup collects those of ``friend_ids`` whose own
    ``friends`` list contains the candidate; the size of that set is the
    mutual friend count used for ranking.
    """
    friend_ids = list(friend_ids)
    return [
        {"$match": {"_id": {"$nin": friend_ids + [user_id]}}},
        {
            "$lookup": {
                "from": "users",
                "let": {"candidate_id": "$_id"},
                "pipeline": [
                    {
                        "$match": {
                            "$expr": {
                                "$and": [
                                    {"$in": ["$_id", friend_ids]},
                                    {"$in": ["$$candidate_id", {"$ifNull": ["$friends", []]}]},
                                ]
                            }
                        }
                    },
                    {"$project": {"_id": 1}},
                ],
                "as": "mutual_friends",
            }
        },
        {"$addFields": {"mutual_friends_count": {"$size": "$mutual_friends"}}},
        {"$sort": {"mutual_friends_count": -1, "_id": 1}},
        {"$limit": limit},
        {"$project": {"_id": 1, "username": 1, "email": 1, "mutual_friends_count": 1}},
    ]


class FriendRepository:
    """Friendship state embedded in the ``users`` collection.

    ``friends`` holds ObjectIds of accepted friends. ``friend_requests`` holds
    the requests a user has *received*, each with its own ``_id``.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._user_collection = db.get_collection("users")

    async def push_friend_request(self, to_user: ObjectId, from_user: ObjectId) -> Optional[str]:
        # only pushes when to_user holds no request at all from from_user
        request_id = ObjectId()
        result = await self._user_collection.update_one(
            {"_id": to_user, "friend_requests": {"$not": {"$elemMatch": {"from": from_user}}}},
            {
                "$push": {
                    "friend_requests": {
                        "_id": request_id,
                        "from": from_user,
                        "status": "pending",
                        "created_at": datetime.now(timezone.utc),
                    }
                }
            },
        )
        if result.modified_count == 0:
            return None
        return str(request_id)

    async def pull_closed_requests(self, to_user: ObjectId, from_user: ObjectId) -> int:
        result = await self._user_collection.update_one(
            {"_id": to_user},
            {"$pull": {"friend_requests": {"from": from_user, "status": {"$ne": "pending"}}}},
        )
        return result.modified_count

    async def pull_pending_request(self, to_user: ObjectId, request_id: ObjectId) -> bool:
        result = await self._user_collection.update_one(
            {"_id": to_user},
            {"$pull": {"friend_requests": {"_id": request_id, "status": "pending"}}},
        )
        return result.modified_count > 0

    async def get_friend_request(self, user_id: ObjectId, request_id: ObjectId) -> Optional[FriendRequestDocument]:
        doc = await self._user_collection.find_one(
            {"_id": user_id, "friend_requests._id": request_id},
            {"friend_requests.$": 1},
        )
        if not doc or not doc.get("friend_requests"):
            return None
        return doc["friend_requests"][0]

    async def has_pending_request(self, user_id: ObjectId, from_user: ObjectId) -> bool:
        doc = await self._user_collection.find_one(
            {"_id": user_id, "friend_requests": {"$elemMatch": {"from": from_user, "status": "pending"}}},
            {"_id": 1},
        )
        return doc is not None

    async def update_request_status(self, user_id: ObjectId, request_id: ObjectId, status: FriendRequestStatus) -> bool:
        # positional update guarded on pending, so a request is only processed once
        result = await self._user_collection.update_one(
            {"_id": user_id, "friend_requests": {"$elemMatch": {"_id": request_id, "status": "pending"}}},
            {"$set": {"friend_requests.$.status": status}},
        )
        return result.modified_count > 0

    async def reopen_request(self, user_id: ObjectId, request_id: ObjectId) -> bool:
        result = await self._user_collection.update_one(
            {"_id": user_id, "friend_requests": {"$elemMatch": {"_id": request_id, "status": "accepted"}}},
            {"$set": {"friend_requests.$.status": "pending"}},
        )
        return result.modified_count > 0

    async def add_friend(self, user_id: ObjectId, friend_id: ObjectId) -> bool:
        result = await self._user_collection.update_one({"_id": user_id}, {"$addToSet": {"friends": friend_id}})
        return result.modified_count > 0

    async def remove_friend(self, user_id: ObjectId, friend_id: ObjectId) -> bool:
        result = await self._user_collection.update_one({"_id": user_id}, {"$pull": {"friends": friend_id}})
        return result.modified_count > 0

    async def list_friends(self, friend_ids: Sequence[ObjectId]) -> List[Dict[str, Any]]:
        if not friend_ids:
            return []
        cursor = self._user_collection.find(
            {"_id": {"$in": list(friend_ids)}},
            {"username": 1, "email": 1},
        ).sort("username", 1)
        results = []
        async for doc in cursor:
            results.append({
                "id": str(doc.get("_id")),
                "username": doc.get("username"),
                "email": doc.get("email"),
            })
        return results

    async def recommend(self, user_id: ObjectId, friend_ids: Sequence[ObjectId], limit: int) -> List[Dict[str, Any]]:
        pipeline = build_recommendation_pipeline(user_id, friend_ids, limit)
        cursor = self._user_collection.aggregate(pipeline)
        items = await cursor.to_list(length=limit)
        return [
            {
                "id": str(it["_id"]),
                "username": it.get("username"),
                "email": it.get("email"),
                "mutual_friends_count": it.get("mutual_friends_count", 0),
            }
            for it in items
        ]
