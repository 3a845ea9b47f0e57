import pytest

from tests.conftest import auth_headers

API = "/api/categories"


@pytest.mark.asyncio
async def test_list_categories_sorted_by_name(client, db):
    await db.categories.insert_many([{"name": "Travel"}, {"name": "Food"}])

    response = await client.get(API)

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Food", "Travel"]


@pytest.mark.asyncio
async def test_admin_creates_category(client, db, admin):
    response = await client.post(
        API, json={"name": "Science", "description": "Papers"}, headers=auth_headers(admin)
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Science"
    assert data["description"] == "Papers"
    assert await db.categories.count_documents({"name": "Science"}) == 1


@pytest.mark.asyncio
async def test_duplicate_name_conflicts(client, db, admin, category):
    response = await client.post(API, json={"name": "Tech"}, headers=auth_headers(admin))

    assert response.status_code == 409
    assert response.json() == {"message": "Category already exists"}
    assert await db.categories.count_documents({"name": "Tech"}) == 1


@pytest.mark.asyncio
async def test_regular_user_cannot_create(client, db, author):
    response = await client.post(API, json={"name": "Science"}, headers=auth_headers(author))

    assert response.status_code == 403
    assert await db.categories.count_documents({}) == 0


@pytest.mark.asyncio
async def test_name_required(client, admin):
    response = await client.post(API, json={"name": ""}, headers=auth_headers(admin))

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "name"
