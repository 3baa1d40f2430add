from datetime import timedelta
from unittest.mock import AsyncMock

import jwt
import pytest
from bson import ObjectId
from fastapi.security import HTTPAuthorizationCredentials

from friendgraph.core.errors import AuthError, FriendshipError
from friendgraph.repositories.user_repository import UserRepository
from friendgraph.schemas.user import UserPublic
from friendgraph.utils.dependencies import get_current_user
from friendgraph.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestPasswords:

    def test_hash_roundtrip(self):
        hashed = hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_garbage_hash(self):
        assert not verify_password("anything", "not-a-hash")
        assert not verify_password("anything", "")


class TestTokens:

    def test_subject_survives(self):
        user_id = str(ObjectId())
        payload = decode_access_token(create_access_token(user_id))
        assert payload["sub"] == user_id
        assert "exp" in payload

    def test_expired(self):
        token = create_access_token("someone", expires_delta=timedelta(seconds=-5))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_tampered(self):
        token = create_access_token("someone")
        with pytest.raises(jwt.PyJWTError):
            decode_access_token(token[:-2] + ("aa" if token[-2:] != "aa" else "bb"))


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_resolves_user(self):
        user_id = ObjectId()
        repo = AsyncMock(spec=UserRepository)
        repo.get_user_by_id.return_value = {"_id": str(user_id), "username": "alice", "email": "alice@example.com"}

        user = await get_current_user(bearer(create_access_token(str(user_id))), repo)

        assert user["username"] == "alice"
        repo.get_user_by_id.assert_awaited_once_with(user_id)

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(AuthError, match="Not authenticated"):
            await get_current_user(None, AsyncMock(spec=UserRepository))

    @pytest.mark.asyncio
    async def test_bad_token(self):
        with pytest.raises(AuthError, match="Invalid or expired token"):
            await get_current_user(bearer("garbage"), AsyncMock(spec=UserRepository))

    @pytest.mark.asyncio
    async def test_subject_not_an_object_id(self):
        with pytest.raises(AuthError, match="Invalid or expired token"):
            await get_current_user(bearer(create_access_token("alice")), AsyncMock(spec=UserRepository))

    @pytest.mark.asyncio
    async def test_deleted_user(self):
        repo = AsyncMock(spec=UserRepository)
        repo.get_user_by_id.return_value = None
        with pytest.raises(AuthError, match="no longer exists"):
            await get_current_user(bearer(create_access_token(str(ObjectId()))), repo)


class TestAuthRouter:

    @pytest.mark.asyncio
    async def test_register(self, client, user_service):
        new_id = str(ObjectId())
        user_service.register_user.return_value = UserPublic(id=new_id, username="bob", email="bob@example.com")

        response = await client.post("/auth/register", json={"username": "bob", "email": "bob@example.com", "password": "hunter22"})

        assert response.status_code == 201
        assert response.json() == {"id": new_id, "username": "bob", "email": "bob@example.com"}
        user_service.register_user.assert_awaited_once_with("bob", "bob@example.com", "hunter22")

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client, user_service):
        user_service.register_user.side_effect = FriendshipError("Email already registered")

        response = await client.post("/auth/register", json={"username": "bob", "email": "bob@example.com", "password": "hunter22"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Email already registered"}

    @pytest.mark.asyncio
    async def test_register_short_password(self, client):
        response = await client.post("/auth/register", json={"username": "bob", "email": "bob@example.com", "password": "x"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_login(self, client, user_service):
        user_id = str(ObjectId())
        user_service.authenticate_user.return_value = {"_id": user_id, "username": "bob", "email": "bob@example.com"}

        response = await client.post("/auth/login", json={"email": "bob@example.com", "password": "hunter22"})

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert decode_access_token(body["access_token"])["sub"] == user_id

    @pytest.mark.asyncio
    async def test_login_bad_credentials(self, client, user_service):
        user_service.authenticate_user.return_value = None

        response = await client.post("/auth/login", json={"email": "bob@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_me(self, client, current_user):
        response = await client.get("/auth/me")

        assert response.status_code == 200
        assert response.json() == {"id": current_user["_id"], "username": "alice", "email": "alice@example.com"}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
