import pytest

from tests.conftest import auth_headers

API = "/api/auth"

USER = {"name": "Carol", "email": "Carol@Example.com", "password": "secret123"}


@pytest.mark.asyncio
async def test_register_login_and_me(client, db):
    register = await client.post(f"{API}/register", json=USER)

    assert register.status_code == 201
    assert register.json()["token_type"] == "bearer"
    stored = await db.users.find_one({"email": "carol@example.com"})
    assert stored["password"] != USER["password"]
    assert stored["role"] == "user"

    login = await client.post(
        f"{API}/login", json={"email": "carol@example.com", "password": "secret123"}
    )
    assert login.status_code == 200

    token = login.json()["access_token"]
    me = await client.get(f"{API}/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "carol@example.com"
    assert "password" not in me.json()


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(client):
    await client.post(f"{API}/register", json=USER)

    response = await client.post(f"{API}/register", json=USER)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_wrong_password(client):
    await client.post(f"{API}/register", json=USER)

    response = await client.post(
        f"{API}/login", json={"email": USER["email"], "password": "wrong-password"}
    )

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid email or password"}


@pytest.mark.asyncio
async def test_register_validation(client):
    response = await client.post(f"{API}/register", json={"name": "", "email": "nope", "password": "1"})

    assert response.status_code == 400
    assert {e["field"] for e in response.json()["errors"]} == {"name", "email", "password"}


@pytest.mark.asyncio
async def test_me_requires_existing_user(client, db, author):
    headers = auth_headers(author)
    await db.users.delete_many({})

    response = await client.get(f"{API}/me", headers=headers)

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
