from datetime import timedelta
from typing import Any, Dict

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app.core.security import create_access_token
from app.core.utils import utcnow
from app.db.mongodb import create_indexes, get_database
from app.main import app
from app.services.uploads import get_upload_storage


@pytest_asyncio.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["blog_test"]
    await create_indexes(database)
    yield database


@pytest_asyncio.fixture
async def client(db):
    app.dependency_overrides[get_database] = lambda: db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def insert_user(db, name: str, email: str, role: str = "user") -> Dict[str, Any]:
    result = await db.users.insert_one({
        "name": name,
        "email": email,
        "password": "not-a-real-hash",
        "role": role,
        "created_at": utcnow(),
    })
    return {"id": str(result.inserted_id), "name": name, "email": email, "role": role}


def auth_headers(user: Dict[str, Any]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user['id'])}"}


@pytest_asyncio.fixture
async def author(db):
    return await insert_user(db, "Alice", "alice@example.com")


@pytest_asyncio.fixture
async def other_user(db):
    return await insert_user(db, "Bob", "bob@example.com")


@pytest_asyncio.fixture
async def admin(db):
    return await insert_user(db, "Root", "root@example.com", role="admin")


@pytest_asyncio.fixture
async def category(db):
    result = await db.categories.insert_one({"name": "Tech", "created_at": utcnow()})
    return {"id": str(result.inserted_id), "name": "Tech"}


@pytest.fixture
def make_post(db):
    """Вставка поста напрямую в базу; каждый следующий пост новее предыдущего."""
    counter = {"n": 0}

    async def _make_post(author, category, **overrides) -> str:
        counter["n"] += 1
        created_at = utcnow() - timedelta(days=30) + timedelta(minutes=counter["n"])
        post = {
            "title": f"Post {counter['n']}",
            "content": f"Content of post {counter['n']}",
            "excerpt": None,
            "category": ObjectId(category["id"]),
            "author": ObjectId(author["id"]),
            "tags": [],
            "featured_image": None,
            "view_count": 0,
            "comments": [],
            "is_published": True,
            "created_at": created_at,
            "updated_at": created_at,
        }
        post.update(overrides)
        result = await db.posts.insert_one(post)
        return str(result.inserted_id)

    return _make_post


class FakeUploadStorage:
    """Запоминает переданные файлы вместо записи на диск."""

    def __init__(self, filename: str = "stored-cover.png"):
        self.filename = filename
        self.saved = []

    async def save(self, upload) -> str:
        self.saved.append((upload.filename, await upload.read()))
        return self.filename


@pytest.fixture
def upload_storage(client):
    storage = FakeUploadStorage()
    app.dependency_overrides[get_upload_storage] = lambda: storage
    return storage
