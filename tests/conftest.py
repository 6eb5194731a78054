"""
Test infrastructure for the Conduit API.

Strategy
--------
- Every test gets a brand-new ``InMemoryStore`` and an app built around it
  by ``create_app``, so there is no shared state to reset between tests.
- bcrypt is slowed down on purpose; ``BCRYPT_ROUNDS`` is lowered through
  the environment *before* ``conduit.config`` is imported so the password
  context is built with the cheap cost factor.
- HTTP tests drive the ASGI app in-process through ``httpx.AsyncClient``
  with ``ASGITransport``; sync route handlers still run on the thread pool
  exactly as they do under uvicorn.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from conduit.main import create_app  # noqa: E402
from conduit.store import InMemoryStore  # noqa: E402


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def app(store: InMemoryStore):
    return create_app(store)


@pytest_asyncio.fixture
async def async_client(app) -> AsyncClient:
    """Yield an httpx.AsyncClient wired to the app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register(async_client: AsyncClient):
    """
    Return an async helper that registers a user over HTTP and returns the
    ``Authorization`` header dict for them.
    """

    async def _register(username: str, email: str | None = None, password: str = "secret123") -> dict:
        resp = await async_client.post("/api/users", json={
            "user": {
                "username": username,
                "email": email or f"{username}@example.com",
                "password": password,
            },
        })
        assert resp.status_code == 201, resp.text
        return {"Authorization": f"Token {resp.json()['user']['token']}"}

    return _register
