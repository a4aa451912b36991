"""
Shared pytest fixtures.

Every test gets a fresh in-memory Mongo database (mongomock-motor) wired into
the app through the ``get_db`` dependency, plus an HTTPX AsyncClient that
talks to the FastAPI app without starting a server.
"""
import os
from uuid import uuid4

# Must be set before the app modules read them
os.environ["JWT_SECRET"] = "test-secret-not-real-0123456789abcdef"
os.environ["ROLE_CACHE_TTL_SECONDS"] = "0"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_not_real"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import PyMongoError

from core.db import get_db, USERS
from core.utils import create_jwt

ADMIN_EMAIL = "admin@truefit.io"
TRAINER_EMAIL = "coach@truefit.io"
MEMBER_EMAIL = "a@x.com"


@pytest.fixture
def mongo_db():
    """Fresh in-memory database per test."""
    return AsyncMongoMockClient()[f"truefit_test_{uuid4().hex}"]


@pytest_asyncio.fixture
async def test_client(mongo_db):
    """
    HTTPX AsyncClient bound to the app, with get_db overridden.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    from api.main import app

    async def override_get_db():
        yield mongo_db

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def auth_headers(email: str) -> dict:
    return {"Authorization": f"Bearer {create_jwt({'email': email})}"}


async def seed_user(db, email: str, role: str = "member", **fields):
    doc = {"email": email, "displayName": email.split("@")[0], "role": role, **fields}
    result = await db[USERS].insert_one(doc)
    return result.inserted_id


@pytest_asyncio.fixture
async def admin_headers(mongo_db):
    await seed_user(mongo_db, ADMIN_EMAIL, role="admin")
    return auth_headers(ADMIN_EMAIL)


@pytest_asyncio.fixture
async def trainer_headers(mongo_db):
    await seed_user(mongo_db, TRAINER_EMAIL, role="trainer", slots=10)
    return auth_headers(TRAINER_EMAIL)


@pytest.fixture
def member_headers():
    return auth_headers(MEMBER_EMAIL)


class _FailingCollection:
    """Collection proxy whose chosen method raises a driver error.

    With ``failures`` set, only that many calls fail and later ones go through.
    """

    def __init__(self, inner, method: str, failures=None):
        self._inner = inner
        self._method = method
        self._failures = failures

    def __getattr__(self, name):
        if name == self._method and self._failures != 0:
            async def fail(*args, **kwargs):
                if self._failures is not None:
                    self._failures -= 1
                raise PyMongoError("simulated outage")
            return fail
        return getattr(self._inner, name)


class FaultyDb:
    """Database proxy that breaks one method of one collection."""

    def __init__(self, db, collection: str, method: str, failures=None):
        self._db = db
        self._collection = collection
        self._method = method
        self._failing = None
        self._failures = failures

    def __getitem__(self, name):
        collection = self._db[name]
        if name != self._collection:
            return collection
        # One proxy per db so the failure budget is shared across lookups
        if self._failing is None:
            self._failing = _FailingCollection(collection, self._method, self._failures)
        return self._failing
