from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from friendgraph.models.user import UserDocument


class UserRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db.get_collection("users")

    async def create_user(self, username: str, email: str, hashed_password: str) -> str:

        doc = {
            "username": username,
            "email": email,
            "hashed_password": hashed_password,
            "friends": [],
            "friend_requests": [],
            "created_at": datetime.now(timezone.utc),
        }
        result = await self._collection.insert_one(doc)
        return str(result.inserted_id)

    async def get_user_by_email(self, email: str) -> Optional[UserDocument]:

        return self._normalize(await self._collection.find_one({"email": email}))

    async def get_user_by_username(self, username: str) -> Optional[UserDocument]:

        return self._normalize(await self._collection.find_one({"username": username}))

    async def get_user_by_id(self, user_id: ObjectId) -> Optional[UserDocument]:

        return self._normalize(await self._collection.find_one({"_id": user_id}))

    @staticmethod
    def _normalize(user: Optional[dict]) -> Optional[UserDocument]:
        if user:
            user["_id"] = str(user["_id"])  # normalize to string for API layer
            user.setdefault("friends", [])
            user.setdefault("friend_requests", [])
        return user
