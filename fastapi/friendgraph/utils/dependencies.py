import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from friendgraph.core.errors import AuthError, InvalidIdError
from friendgraph.database.connection import mongo_db_dependency
from friendgraph.repositories.user_repository import UserRepository
from friendgraph.schemas.user import TokenPayload
from friendgraph.utils.object_id import parse_object_id
from friendgraph.utils.security import decode_access_token


logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_user_repository(db=Depends(mongo_db_dependency)) -> UserRepository:
    return UserRepository(db)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    user_repo: UserRepository = Depends(get_user_repository),
) -> dict:
    if credentials is None:
        raise AuthError("Not authenticated")
    try:
        payload = TokenPayload(**decode_access_token(credentials.credentials))
        user_oid = parse_object_id(payload.sub, "token subject")
    except (jwt.PyJWTError, InvalidIdError) as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise AuthError("Invalid or expired token") from None

    user = await user_repo.get_user_by_id(user_oid)
    if not user:
        raise AuthError("User no longer exists")
    return user
