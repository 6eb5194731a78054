"""
User endpoint tests — registration, login, the current-user endpoints and
the metrics endpoint.
"""
import pytest
from httpx import AsyncClient


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_user(async_client: AsyncClient):
    """Registering returns 201 with the public fields and a token."""
    resp = await async_client.post("/api/users", json={
        "user": {"username": "alice", "email": "alice@x.com", "password": "secret123"},
    })
    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["username"] == "alice"
    assert user["email"] == "alice@x.com"
    assert user["bio"] == ""
    assert user["image"] is None
    assert user["token"]
    assert "password" not in user


@pytest.mark.asyncio
async def test_register_missing_password(async_client: AsyncClient):
    resp = await async_client.post("/api/users", json={
        "user": {"username": "alice", "email": "alice@x.com"},
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_register_duplicate_username_returns_409(async_client: AsyncClient, register):
    await register("alice")
    resp = await async_client.post("/api/users", json={
        "user": {"username": "alice", "email": "other@x.com", "password": "pw"},
    })
    assert resp.status_code == 409
    assert "username" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_register_duplicate_email_returns_409(async_client: AsyncClient, register):
    await register("alice", email="shared@x.com")
    resp = await async_client.post("/api/users", json={
        "user": {"username": "bob", "email": "shared@x.com", "password": "pw"},
    })
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login(async_client: AsyncClient, register):
    await register("alice", password="hunter22")
    resp = await async_client.post("/api/users/login", json={
        "user": {"email": "alice@example.com", "password": "hunter22"},
    })
    assert resp.status_code == 200
    assert resp.json()["user"]["username"] == "alice"


@pytest.mark.asyncio
async def test_login_wrong_password_returns_401(async_client: AsyncClient, register):
    await register("alice", password="hunter22")
    resp = await async_client.post("/api/users/login", json={
        "user": {"email": "alice@example.com", "password": "wrong"},
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_email_returns_401(async_client: AsyncClient):
    resp = await async_client.post("/api/users/login", json={
        "user": {"email": "ghost@example.com", "password": "whatever"},
    })
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_current_user(async_client: AsyncClient, register):
    headers = await register("alice")
    resp = await async_client.get("/api/user", headers=headers)
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["email"] == "alice@example.com"
    assert user["token"] == headers["Authorization"].split(" ", 1)[1]


@pytest.mark.asyncio
async def test_bearer_scheme_accepted(async_client: AsyncClient, register):
    headers = await register("alice")
    token = headers["Authorization"].split(" ", 1)[1]
    resp = await async_client.get("/api/user", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "Token", "Basic abc", "Token not-a-jwt"])
async def test_current_user_requires_valid_token(async_client: AsyncClient, header):
    headers = {"Authorization": header} if header else {}
    resp = await async_client.get("/api/user", headers=headers)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_update_current_user(async_client: AsyncClient, register):
    headers = await register("alice")
    resp = await async_client.put("/api/user", headers=headers, json={
        "user": {"bio": "I write things", "image": "https://img/alice.png"},
    })
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["bio"] == "I write things"
    assert user["image"] == "https://img/alice.png"
    assert user["username"] == "alice"


@pytest.mark.asyncio
async def test_update_email_reissues_token(async_client: AsyncClient, register):
    old_headers = await register("alice")
    resp = await async_client.put("/api/user", headers=old_headers, json={
        "user": {"email": "alice@new.com"},
    })
    assert resp.status_code == 200
    new_headers = {"Authorization": f"Token {resp.json()['user']['token']}"}

    # The old token names an email that no longer exists.
    assert (await async_client.get("/api/user", headers=old_headers)).status_code == 401
    current = await async_client.get("/api/user", headers=new_headers)
    assert current.json()["user"]["email"] == "alice@new.com"


@pytest.mark.asyncio
async def test_update_password_then_login(async_client: AsyncClient, register):
    headers = await register("alice", password="before")
    await async_client.put("/api/user", headers=headers, json={"user": {"password": "after"}})
    resp = await async_client.post("/api/users/login", json={
        "user": {"email": "alice@example.com", "password": "after"},
    })
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_update_username_collision_returns_409(async_client: AsyncClient, register):
    headers = await register("alice")
    await register("bob")
    resp = await async_client.put("/api/user", headers=headers, json={"user": {"username": "bob"}})
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_metrics(async_client: AsyncClient, register):
    headers = await register("alice")
    await async_client.post("/api/articles", headers=headers, json={
        "article": {"title": "One", "description": "d", "body": "b", "tagList": ["x"]},
    })
    await async_client.post("/api/articles/one/comments", headers=headers, json={
        "comment": {"body": "first"},
    })
    resp = await async_client.get("/api/metrics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_users"] == 1
    assert data["total_articles"] == 1
    assert data["total_comments"] == 1
    assert data["total_tags"] == 1
    assert data["avg_comments_per_article"] == 1.0


@pytest.mark.asyncio
async def test_metrics_empty(async_client: AsyncClient):
    resp = await async_client.get("/api/metrics")
    assert resp.json()["avg_comments_per_article"] == 0
