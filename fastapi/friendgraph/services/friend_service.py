import logging
from typing import Any, Dict, List

from friendgraph.core.errors import FriendshipError, NotFoundError
from friendgraph.repositories.friend_repository import FriendRepository
from friendgraph.repositories.user_repository import UserRepository
from friendgraph.utils.object_id import parse_object_id


logger = logging.getLogger(__name__)


class FriendService:

    def __init__(self, friend_repo: FriendRepository, user_repo: UserRepository):
        self.friend_repo = friend_repo
        self.user_repo = user_repo

    async def _require_user(self, user_id) -> dict:
        user = await self.user_repo.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def send_friend_request(self, from_user: str, to_user: str) -> str:
        from_oid = parse_object_id(from_user, "user id")
        to_oid = parse_object_id(to_user, "user id")
        if from_oid == to_oid:
            raise FriendshipError("Cannot send a friend request to yourself")

        target = await self._require_user(to_oid)
        if from_oid in target["friends"]:
            raise FriendshipError("Already friends")
        if await self.friend_repo.has_pending_request(from_oid, to_oid):
            raise FriendshipError("This user has already sent you a friend request")

        # an old accepted/rejected request gives way to a fresh one
        await self.friend_repo.pull_closed_requests(to_oid, from_oid)
        request_id = await self.friend_repo.push_friend_request(to_oid, from_oid)
        if request_id is None:
            raise FriendshipError("Friend request already sent")
        # a request in the other direction may have landed between the check and the push
        if await self.friend_repo.has_pending_request(from_oid, to_oid):
            await self.friend_repo.pull_pending_request(to_oid, parse_object_id(request_id, "request id"))
            raise FriendshipError("This user has already sent you a friend request")
        logger.info("Friend request %s sent from %s to %s", request_id, from_user, to_user)
        return request_id

    async def respond_to_request(self, user_id: str, request_id: str, status: str) -> str:
        """Accept or reject a request the user received. Returns the new status."""
        if status not in ("accepted", "rejected"):
            raise FriendshipError("Status must be 'accepted' or 'rejected'")
        user_oid = parse_object_id(user_id, "user id")
        request_oid = parse_object_id(request_id, "request id")

        request = await self.friend_repo.get_friend_request(user_oid, request_oid)
        if not request:
            raise NotFoundError("Request not found")
        if request["status"] != "pending":
            raise FriendshipError("Friend request already processed")

        sender_oid = request["from"]
        if status == "accepted":
            await self._require_user(sender_oid)

        if not await self.friend_repo.update_request_status(user_oid, request_oid, status):
            raise FriendshipError("Friend request already processed")

        if status == "accepted":
            await self._link_friends(user_oid, sender_oid, request_oid)
        logger.info("Friend request %s %s by %s", request_id, status, user_id)
        return status

    async def _link_friends(self, user_oid, sender_oid, request_oid) -> None:
        """Add both friendship edges; on failure undo the edges added and reopen the request."""
        added = []
        try:
            for owner, friend in ((user_oid, sender_oid), (sender_oid, user_oid)):
                if await self.friend_repo.add_friend(owner, friend):
                    added.append((owner, friend))
        except Exception:
            logger.error("Accepting friend request %s failed, rolling back", request_oid, exc_info=True)
            for owner, friend in added:
                await self.friend_repo.remove_friend(owner, friend)
            await self.friend_repo.reopen_request(user_oid, request_oid)
            raise

    async def get_recommendations(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        user_oid = parse_object_id(user_id, "user id")
        user = await self._require_user(user_oid)
        return await self.friend_repo.recommend(user_oid, user["friends"], limit)

    async def unfriend(self, user_id: str, friend_id: str) -> None:
        user_oid = parse_object_id(user_id, "user id")
        friend_oid = parse_object_id(friend_id, "user id")
        if user_oid == friend_oid:
            raise FriendshipError("Cannot unfriend yourself")
        await self._require_user(user_oid)
        await self._require_user(friend_oid)
        await self.friend_repo.remove_friend(user_oid, friend_oid)
        await self.friend_repo.remove_friend(friend_oid, user_oid)
        logger.info("User %s unfriended %s", user_id, friend_id)

    async def get_friend_list(self, user_id: str) -> List[Dict[str, Any]]:
        user = await self._require_user(parse_object_id(user_id, "user id"))
        return await self.friend_repo.list_friends(user["friends"])

    async def get_received_requests(self, user_id: str) -> List[Dict[str, Any]]:
        user = await self._require_user(parse_object_id(user_id, "user id"))
        return [
            {
                "id": str(req["_id"]),
                "from_user": str(req["from"]),
                "status": req["status"],
                "created_at": req.get("created_at"),
            }
            for req in user["friend_requests"]
            if req.get("status") == "pending"
        ]
