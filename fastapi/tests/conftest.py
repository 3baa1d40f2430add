"""
Shared fixtures. No MongoDB is needed: services are replaced with mocks
through FastAPI dependency overrides and repositories get mocked collections.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from friendgraph.main import create_app
from friendgraph.routers.auth import get_user_service
from friendgraph.routers.friends import get_friend_service
from friendgraph.services.friend_service import FriendService
from friendgraph.services.user_service import UserService
from friendgraph.utils.dependencies import get_current_user


@pytest.fixture
def current_user():
    return {
        "_id": str(ObjectId()),
        "username": "alice",
        "email": "alice@example.com",
        "friends": [],
        "friend_requests": [],
    }


@pytest.fixture
def friend_service():
    return AsyncMock(spec=FriendService)


@pytest.fixture
def user_service():
    return AsyncMock(spec=UserService)


@pytest.fixture
def app(current_user, friend_service, user_service):
    app = create_app()
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_friend_service] = lambda: friend_service
    app.dependency_overrides[get_user_service] = lambda: user_service
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def users_collection():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
    return collection


@pytest.fixture
def db(users_collection):
    db = MagicMock()
    db.get_collection.return_value = users_collection
    return db
