import logging
from typing import Optional

from pymongo.errors import DuplicateKeyError

from friendgraph.core.errors import FriendshipError
from friendgraph.repositories.user_repository import UserRepository
from friendgraph.schemas.user import UserPublic
from friendgraph.utils.security import hash_password, verify_password


logger = logging.getLogger(__name__)


class UserService:
    """Registration and credential checks for users."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    async def register_user(self, username: str, email: str, password: str) -> UserPublic:
        """
        Register a new user.
        - email and username must both be unused
        - the password is stored hashed
        """
        if await self.user_repository.get_user_by_email(email):
            raise FriendshipError("Email already registered")
        if await self.user_repository.get_user_by_username(username):
            raise FriendshipError("Username already taken")

        try:
            new_id = await self.user_repository.create_user(
                username=username,
                email=email,
                hashed_password=hash_password(password),
            )
        except DuplicateKeyError as exc:
            # lost a race with a concurrent registration; the unique index decides
            key_pattern = (exc.details or {}).get("keyPattern") or {}
            if "username" in key_pattern:
                raise FriendshipError("Username already taken") from None
            raise FriendshipError("Email already registered") from None
        logger.info("Registered user %s (%s)", username, new_id)
        return UserPublic(id=new_id, username=username, email=email)

    async def authenticate_user(self, email: str, password: str) -> Optional[dict]:
        user = await self.user_repository.get_user_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.get("hashed_password", "")):
            return None
        return user
