import itertools
from datetime import datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from edubridge.database.connection import mongo_db_dependency
from edubridge.database.indexes import ensure_indexes
from edubridge.main import app
from edubridge.repositories.user_repository import UserRepository
from edubridge.utils.security import create_access_token, hash_password


_counter = itertools.count()


@pytest.fixture
async def db():
    database = AsyncMongoMockClient()[f"edubridge_test_{next(_counter)}"]
    await ensure_indexes(database)
    return database


@pytest.fixture
async def client(db):
    app.dependency_overrides[mongo_db_dependency] = lambda: db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    repo = UserRepository(db)

    async def _make(name="Test User", role="STUDENT", email=None, password="secret123"):
        email = email or f"user{next(_counter)}@example.com"
        return await repo.create_user(
            email=email,
            hashed_password=hash_password(password),
            name=name,
            phone="0123456789",
            role=role,
        )

    return _make


def auth_header(user: dict) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user['_id'], {'role': user.get('role')})}"}


def ts(minutes: int) -> datetime:
    return datetime(2024, 1, 1, 12, 0) + timedelta(minutes=minutes)
